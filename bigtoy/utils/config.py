import os
from pathlib import Path
from dotenv import load_dotenv

from bigtoy.constants import (
    DEFAULT_ANALYSIS_TIMEOUT,
    DEFAULT_IDEA_ENDPOINT_URL,
    DEFAULT_LANGUAGE,
    DEFAULT_UPLOAD_TIMEOUT,
)


class Config:
    def __init__(self):
        # Load appropriate .env file based on environment
        self.env = os.getenv("BIGTOY_ENV", "dev")
        self._load_env_file()

        # Idea-Generation Endpoint settings
        self.idea_endpoint_url = os.getenv("IDEA_ENDPOINT_URL", DEFAULT_IDEA_ENDPOINT_URL)
        self.analysis_timeout = float(os.getenv("ANALYSIS_TIMEOUT", DEFAULT_ANALYSIS_TIMEOUT))
        self.default_language = os.getenv("DEFAULT_LANGUAGE", DEFAULT_LANGUAGE)

        # Cloudinary settings
        self.cloudinary_cloud_name = os.getenv("CLOUDINARY_CLOUD_NAME")
        self.cloudinary_upload_preset = os.getenv("CLOUDINARY_UPLOAD_PRESET")
        self.upload_timeout = float(os.getenv("UPLOAD_TIMEOUT", DEFAULT_UPLOAD_TIMEOUT))

        # Identity provider settings
        self.user_id = os.getenv("BIGTOY_USER_ID")

        # Logging settings
        self.log_level = os.getenv("LOG_LEVEL", "WARNING").upper()
        self.log_format = os.getenv("LOG_FORMAT", "%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    def _load_env_file(self):
        """Load the appropriate .env file based on the environment."""
        env_file = ".env"

        # Check for environment-specific .env file
        if self.env != "dev":
            env_specific_file = f".env.{self.env}"
            if Path(env_specific_file).exists():
                env_file = env_specific_file
                print(f"Loading environment from {env_file}")
            else:
                print(f"Warning: {env_specific_file} not found, falling back to .env")

        # Load the environment file
        load_dotenv(env_file)

# Create a global config instance
config = Config()
