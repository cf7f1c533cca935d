"""Constants for s3ferry"""

# Configuration file
CONFIG_ENV_VAR = "S3FERRY_CONFIG"
CONFIG_FILE_NAME = "s3.json"

# Static credential overrides, applied at process start
ENV_ACCESS_KEY = "AWS_ACCESS_KEY_ID"
ENV_SECRET_KEY = "AWS_SECRET_ACCESS_KEY"
ENV_SESSION_TOKEN = "AWS_SESSION_TOKEN"

DEFAULT_REGION = "sa-east-1"

# Vault
VAULT_API_VERSION = "v1"
VAULT_AUTH_TOKEN = "token"
VAULT_AUTH_APPROLE = "approle"
VAULT_AUTH_CERT = "cert"
VAULT_AUTH_METHODS = [VAULT_AUTH_TOKEN, VAULT_AUTH_APPROLE, VAULT_AUTH_CERT]
VAULT_DEFAULT_APPROLE_PATH = "auth/approle/login"
VAULT_DEFAULT_CERT_PATH = "auth/cert/login"
VAULT_DEFAULT_ENGINE_PATH = "aws"
VAULT_STS_SUFFIX = "sts"
VAULT_ENGINE_VERSIONS = ["1", "2"]
VAULT_ENGINE_VERSION_AUTO = "auto"
VAULT_SECRET_TTL = "3600s"
# (connect, read) in seconds
VAULT_TIMEOUT = (10, 30)

# Keys returned by the vault AWS secrets engine
STS_ACCESS_KEY = "access_key"
STS_SECRET_KEY = "secret_key"
STS_SESSION_TOKEN = "security_token"

# S3
MiB = 1024 * 1024
GiB = 1024 * MiB
LIST_PAGE_SIZE = 1000
MIN_PART_SIZE = 5 * MiB
PART_SIZE_SMALL = 64 * MiB
PART_SIZE_MEDIUM = 100 * MiB
PART_SIZE_LARGE = 250 * MiB
TIER_SMALL_LIMIT = 10 * GiB
TIER_MEDIUM_LIMIT = 100 * GiB
DOWNLOAD_PART_SIZE = 64 * MiB
S3_CONNECT_TIMEOUT = 30
S3_READ_TIMEOUT = 90

# Rename masks
DEFAULT_MASK = "#FN#FE"
RENAME_TOKENS_HELP = """\b
#DY = year 4 digits
#YY = year 2 digits
#DM = month number
#DD = day of month
#DJ = day of year
#TH = hour 2 digits 00-23h
#TM = minute 2 digits 00-59
#TS = second 2 digits 00-59
#TU = milliseconds 3 digits 000-999
#SP = timestamp format yyyymmddhhMMssffffff
#FN = file name without extension
#FE = file extension with dot
#R1 = random number 1 digit 0-9
#R2 = random number 2 digits 00-99
#R4 = random number 4 digits 0000-9999"""
