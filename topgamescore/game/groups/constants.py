GROUP_STATUS_DRAFT = "draft"
GROUP_STATUS_OPEN = "open"
GROUP_STATUS_FINISHED = "finished"

GROUP_STATUSES = frozenset({GROUP_STATUS_DRAFT, GROUP_STATUS_OPEN, GROUP_STATUS_FINISHED})

GROUP_DEFAULT_TITLE = "Quiz"
GROUP_DEFAULT_LOCALE = "en"
GROUP_TITLE_MAX_LENGTH = 128
GROUP_CODE_LENGTH = 8
GROUP_CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"

NO_QUESTION_INDEX = -1

QUESTION_MIN_OPTIONS = 2
QUESTION_TEXT_MAX_LENGTH = 500
QUESTION_OPTION_MAX_LENGTH = 200
