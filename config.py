import os

# Average driving speed used to turn detour distance into minutes
AVG_SPEED_KPH = float(os.environ.get("MATCH_AVG_SPEED_KPH", "30"))

# Departure window tolerance (minutes) for immediate vs scheduled requests
RIDE_NOW_WINDOW_MINUTES = float(os.environ.get("MATCH_RIDE_NOW_WINDOW_MIN", "5"))
SCHEDULED_WINDOW_MINUTES = float(os.environ.get("MATCH_SCHEDULED_WINDOW_MIN", "15"))

# Fixed ceiling on detour minutes, applied on top of each offer's own limit; not configurable
MAX_DETOUR_MINUTES = 5.0

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()
DEBUG = os.environ.get("APP_DEBUG", "0") == "1"
