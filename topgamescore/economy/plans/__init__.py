from topgamescore.economy.plans.service import PlanService

__all__ = ["PlanService"]
