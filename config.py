"""
Local configuration for ANX connectivity and credentials.

Keep this file out of version control once real secrets are filled in.
Environment variables (ANX_API_KEY, ANX_API_SECRET, ANX_API_URL, ...) take
precedence over the values below.
"""

ANX_API_URL = "https://anxpro.com/"
ANX_API_VERSION = "3"
# Ticker and depth endpoints are only served by the older v2 API.
ANX_MARKET_DATA_API_VERSION = "2"

# HTTP timeout (seconds) for every REST call.
ANX_TIMEOUT_SECONDS = 10.0

# Pairs enabled for trading, in ANX's native notation.
ANX_ENABLED_PAIRS = [
    "BTCUSD",
    "BTCHKD",
    "LTCBTC",
    "ETHBTC",
]

# ANX accounts. ``api_secret`` is the base64 string issued by ANX.
ANX_ACCOUNTS = {
    "default": {
        "api_key": "",
        "api_secret": "",
    },
}
