# File: mediasense/core/database/base.py

from sqlalchemy.orm import declarative_base

# Shared registry for every persisted model (currently the processing jobs).
Base = declarative_base()
