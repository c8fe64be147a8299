# auth_strategies/constants.py

TOTP = "totp"
YUBIKEY = "yubikey"

# RFC 6238 parameters shared with common authenticator apps
TOTP_DIGITS = 6
TOTP_INTERVAL_SECONDS = 30

# Session key holding the id of the method that satisfied verification
SESSION_2FA_METHOD_KEY = "2fa_method"
SESSION_KEY_PREFIX = "session:"

# Yubico OTP layout: optional static password, 0-16 char public id, 32 char token
MODHEX_ALPHABET = "cbdefghijklnrtuv"
# The same keys typed on a Dvorak layout
DVORAK_MODHEX_ALPHABET = "jxe.uidchtnbpygk"
YUBIKEY_TOKEN_LENGTH = 32
YUBIKEY_MAX_PREFIX_LENGTH = 16

# YubiCloud response statuses; anything else means no answer could be given
YUBICO_STATUS_OK = "OK"
YUBICO_STATUS_BAD_OTP = "BAD_OTP"
YUBICO_STATUS_REPLAYED_OTP = "REPLAYED_OTP"
YUBICO_STATUS_REPLAYED_REQUEST = "REPLAYED_REQUEST"
