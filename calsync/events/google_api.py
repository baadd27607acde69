# ╔════════════════════════════════════════════════════════════════════════════╗
# ║                      EVENTS GOOGLE API MODULE                              ║
# ║    Builds OAuth user credentials from the parsed token and client          ║
# ║    secrets, and initializes the Google Calendar API service.               ║
# ╚════════════════════════════════════════════════════════════════════════════╝

"""
google_api.py: Google Calendar API setup and service initialization.
"""
from google.oauth2.credentials import Credentials
from googleapiclient.discovery import build

from calsync.config import ClientSecrets, GoogleToken
from calsync.utils.error_handling import ConfigurationError
from calsync.utils.logging import logger

# ╔════════════════════════════════════════════════════════════════════════════╗
# ║ CONSTANTS                                                                  ║
# ╚════════════════════════════════════════════════════════════════════════════╝

SCOPES = ["https://www.googleapis.com/auth/calendar.readonly"]

# ╔════════════════════════════════════════════════════════════════════════════╗
# ║ CREDENTIALS & SERVICE                                                      ║
# ╚════════════════════════════════════════════════════════════════════════════╝

# --- build_credentials ---
# Combines the user token and the OAuth client identity into google-auth
# Credentials. The token's own scopes are kept when present so a refresh
# asks for exactly what was granted.
# Args:
#     token: Parsed google-token input.
#     client_secrets: Parsed google-credentials input.
# Returns: google.oauth2.credentials.Credentials
def build_credentials(token: GoogleToken, client_secrets: ClientSecrets) -> Credentials:
    return Credentials(
        token=token.access_token,
        refresh_token=token.refresh_token,
        token_uri=client_secrets.token_uri,
        client_id=client_secrets.client_id,
        client_secret=client_secrets.client_secret,
        scopes=token.scopes or SCOPES,
        expiry=token.expiry,
    )

# --- build_service ---
# Builds the Google Calendar API service object (v3).
# Args:
#     credentials: Authorized user credentials.
# Returns: The Calendar API resource.
# Raises: ConfigurationError if the client cannot be constructed.
def build_service(credentials: Credentials):
    try:
        service = build("calendar", "v3", credentials=credentials, cache_discovery=False)
    except Exception as e:
        raise ConfigurationError(f"Error initializing Google Calendar service: {e}") from e
    logger.debug("Google Calendar service initialized.")
    return service
