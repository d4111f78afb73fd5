SESSION_STATE_NOT_JOINED = "not_joined"
SESSION_STATE_JOINED_WAITING = "joined_waiting"
SESSION_STATE_ANSWERING = "answering"
SESSION_STATE_ANSWERED = "answered"
SESSION_STATE_ADVANCING = "advancing"
SESSION_STATE_RANKING = "ranking"

SESSION_STATES = (
    SESSION_STATE_NOT_JOINED,
    SESSION_STATE_JOINED_WAITING,
    SESSION_STATE_ANSWERING,
    SESSION_STATE_ANSWERED,
    SESSION_STATE_ADVANCING,
    SESSION_STATE_RANKING,
)
