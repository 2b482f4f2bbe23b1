from .add_product import AddToCartResult, add_product_to_cart

__all__ = ["AddToCartResult", "add_product_to_cart"]
