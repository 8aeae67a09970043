"""Storage gateway contract and its SQLAlchemy implementation."""
