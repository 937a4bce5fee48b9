"""Version metadata for DealershipManager."""

__app_name__ = "DealershipManager"
__company__ = "Modern Car Sale"
__version__ = "1.0.0"
