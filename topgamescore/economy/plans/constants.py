PLAN_FREE = "free"
PLAN_PRO = "pro"

PLANS = frozenset({PLAN_FREE, PLAN_PRO})
