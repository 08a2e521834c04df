# ruikit_cli/__init__.py
