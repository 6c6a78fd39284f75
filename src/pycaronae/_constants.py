"""Internal constants shared across the library."""

BASE_URL = "https://api.caronae.com.br"
USER_AGENT = "pycaronae/0.1"
DEFAULT_TIME_ZONE = "America/Sao_Paulo"

# ------------------------------------------------------------------
# Remote ride endpoints
# ------------------------------------------------------------------

ALL_RIDES_PATH = "/ride/all"
OFFERED_RIDES_PATH = "/user/{user_id}/offeredRides"
ACTIVE_RIDES_PATH = "/ride/getMyActiveRides"
RIDES_HISTORY_PATH = "/ride/getRidesHistory"
SEARCH_RIDES_PATH = "/ride/listFiltered"
REQUESTERS_PATH = "/ride/getRequesters/{ride_id}"
CREATE_RIDE_PATH = "/ride"
FINISH_RIDE_PATH = "/ride/finishRide"
LEAVE_RIDE_PATH = "/ride/leaveRide"
DELETE_ROUTINE_PATH = "/ride/allFromRoutine/{routine_id}"
REQUEST_JOIN_PATH = "/ride/requestJoin"
ANSWER_JOIN_REQUEST_PATH = "/ride/answerJoinRequest"
VALIDATE_DUPLICATE_PATH = "/ride/validateDuplicate"

# ------------------------------------------------------------------
# Date/time renderings expected by the remote
# ------------------------------------------------------------------

SEARCH_DATE_FORMAT = "%Y-%m-%d"
SEARCH_TIME_FORMAT = "%H:%M"
VALIDATE_DATE_FORMAT = "%d/%m/%Y"
VALIDATE_TIME_FORMAT = "%H:%M:%S"
RIDE_DATE_FORMAT = "%Y-%m-%d"
RIDE_TIME_FORMAT = "%H:%M:%S"

NEIGHBORHOOD_SEPARATOR = ", "
