# tools/__init__.py
