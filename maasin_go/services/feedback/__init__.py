from maasin_go.services.feedback.service import FeedbackService, validate_rating

__all__ = ["FeedbackService", "validate_rating"]
