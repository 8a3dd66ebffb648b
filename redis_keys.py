REDIS_ROOM_KEY = "signal:room:{slug}" # room id -> host connection id
REDIS_HOST_ROOMS_KEY = "signal:host:{connection_id}" # connection id - set of room ids it hosts
REDIS_ROOM_PATTERN = "signal:room:*"
REDIS_CHANNEL = "signal:socketio" # pub/sub channel used by the socket.io manager

# **Example layout**
# - `signal:room:k3x9qa` = `"Zq1c0Yb8n2AAAB"` (host sid)
# - `signal:host:Zq1c0Yb8n2AAAB` = {`k3x9qa`}
# No TTL: a room lives until its host disconnects.
