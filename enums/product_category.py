from enum import Enum


class ProductCategory(str, Enum):
    """Closed set of listing categories. Values are stored verbatim."""
    ELECTRONICS = "Electronics"
    CLOTHING = "Clothing"
    BOOKS = "Books"
    HOME_AND_GARDEN = "Home & Garden"
    SPORTS = "Sports"
    TOYS = "Toys"
    VEHICLES = "Vehicles"
    OTHER = "Other"
