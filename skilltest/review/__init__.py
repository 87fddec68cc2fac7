from .review_queue import ReviewQueue, apply_attempt, display_order

__all__ = ["ReviewQueue", "apply_attempt", "display_order"]
