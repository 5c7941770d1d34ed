"""
osmaps - фасад над асинхронно инициализируемым картографическим API.
"""
__version__ = "0.1.0"
