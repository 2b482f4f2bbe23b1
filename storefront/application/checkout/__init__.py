from .pipeline import CheckoutPipeline, CheckoutResult

__all__ = ["CheckoutPipeline", "CheckoutResult"]
