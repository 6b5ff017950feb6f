"""parcelflow - order, payment and shipment lifecycle core for a logistics platform"""

__version__ = "0.1.0"
