# Package marker
__version__ = "0.1.0"
