"""
utils/constants.py

Purpose: Centralized static content

- Bot message templates (operator notification, verification code)
- Game and design catalogue labels
- User-facing error texts
- Fallback country reference list

(Prevents hardcoding across the codebase)
"""

# ============================================================
# CATALOGUE LABELS
# ============================================================

DESIGN_LABELS = {
    "preview": "🖼 YouTube Preview",
    "banner": "🚩 Kanal Banneri",
    "avatar": "👤 Avatarka",
    "logo": "🎨 Logotip",
}

GAME_LABELS = {
    "pubg": "🔫 PUBG Mobile",
    "minecraft": "⛏ Minecraft",
    "csgo": "🎯 CS:GO / CS2",
    "vlog": "📹 Vlog / Lifestyle",
    "gta": "🚔 GTA V",
    "valorant": "💠 Valorant",
    "freefire": "🔥 Free Fire",
    "roblox": "🟥 Roblox",
    "fifa": "⚽️ EA FC (FIFA)",
    "cod": "🪖 Call of Duty",
    "dota": "⚔️ Dota 2",
    "standoff": "🔫 Standoff 2",
    "other": "🎲 Boshqa",
}

# ============================================================
# TELEGRAM MESSAGES (HTML parse mode)
# ============================================================

ORDER_NOTIFICATION_TEMPLATE = """
<b>💎 YANGI BEPUL BUYURTMA</b>
➖➖➖➖➖➖➖➖
👤 <b>Mijoz:</b> <a href="https://t.me/{username}">{first_name} {last_name}</a>
📧 <b>Email:</b> {email}
📱 <b>Tel:</b> {phone}{carrier}
🌐 <b>Username:</b> @{username}
➖➖➖➖➖➖➖➖
🎮 <b>O'yin:</b> {game}
🛠 <b>Xizmat:</b> {design}
💰 <b>Narxi:</b> BEPUL (0 so'm){location}
➖➖➖➖➖➖➖➖
📝 <b>Izoh:</b>
<i>{comment}</i>
"""

ORDER_LOCATION_LINE = "\n📍 <b>Joylashuv:</b> {city}, {region}, {country}"

EMAIL_NOT_PROVIDED = "Kiritilmagan"

VERIFICATION_CODE_TEMPLATE = """
<b>🔐 ELBEK PRODUCTIONS TASDIQLASH</b>
➖➖➖➖➖➖➖➖
Sizning tasdiqlash kodingiz:
<code>{code}</code>

⚠️ Bu kodni hech kimga bermang.
"""

# Bot API error description for a user who never opened the bot
BOT_NOT_STARTED_MARKER = "chat not found"

# ============================================================
# ERROR TEXTS
# ============================================================

BOT_NOT_STARTED_MESSAGE = "Start the bot first, then request the code again: https://t.me/{bot_username}"
INVALID_TELEGRAM_ID_MESSAGE = "Valid Telegram ID required"
INVALID_CODE_MESSAGE = "Invalid verification code"
NICKNAME_REQUIRED_MESSAGE = "Nickname required"
TELEGRAM_NETWORK_ERROR_MESSAGE = "Network Error"
REGISTRATION_FAILED_MESSAGE = "Failed to register. Try again."
LINK_FAILED_MESSAGE = "Database Error"

LOCATION_FIELDS_REQUIRED_MESSAGE = "Please fill all fields completely."
GPS_UNSUPPORTED_MESSAGE = "Geolocation is not supported. Please use a mobile device or enable GPS."
GPS_DENIED_MESSAGE = "GPS ACCESS DENIED. YOU MUST ALLOW LOCATION TO PROCEED."
GPS_TIMEOUT_MESSAGE = "GPS timed out. Move to an open area and try again."

COUNTRY_MISMATCH_MESSAGE = "LOCATION MISMATCH. DETECTED: {observed}"
REGION_MISMATCH_MESSAGE = "REGION MISMATCH. DETECTED: {observed}"
CITY_MISMATCH_MESSAGE = "CITY MISMATCH. DETECTED: {observed}"

AUTO_BAN_REASON = "Location Verification Failed 3 times (System Auto-Ban)"
BANNED_MESSAGE = "Your account has been banned for violating the verification rules."

# ============================================================
# COUNTRY REFERENCE FALLBACK
# ============================================================

FALLBACK_COUNTRIES = [
    {"name": "Uzbekistan", "iso_code": "UZ", "flag": ""},
    {"name": "Russia", "iso_code": "RU", "flag": ""},
    {"name": "United States", "iso_code": "US", "flag": ""},
]
