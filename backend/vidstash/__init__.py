"""Video download front-end with a self-expiring downloads directory"""

__version__ = "1.0.0"
