"""Configuration settings for EVIE."""

import os

# Data source (CLI --csv overrides the environment)
DEFAULT_DATA_PATH = os.getenv("EVIE_DATA_PATH", "Electric_Vehicle_Population_Data.csv")

# Table view
DEFAULT_PAGE_SIZE = 10
PAGE_SIZE_OPTIONS = (5, 10, 25, 50)
DEFAULT_SORT_FIELD = "Make"
DEFAULT_SORT_DIRECTION = "asc"

# Derived views kept per dataset version (least recently used evicted first)
VIEW_CACHE_SIZE = 32

# Manufacturer distribution keeps only the largest groups
TOP_MAKES = 10

EXPORT_FILENAME = "ev_data_export.csv"

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
