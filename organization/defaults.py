"""
Default catalogue entries created on a fresh install.
"""

import logging

from django.db import transaction

from .models import Category, Region, RegionType

logger = logging.getLogger(__name__)

DEFAULT_CATEGORIES = [
    {'name': 'Road', 'description': 'Issues related to roads and traffic'},
    {'name': 'Electricity', 'description': 'Issues related to electrical supply and infrastructure'},
    {'name': 'Water', 'description': 'Issues related to water supply and drainage'},
    {'name': 'Sanitation', 'description': 'Issues related to waste management and cleanliness'},
    {'name': 'Public Property', 'description': 'Issues related to public buildings and spaces'},
    {'name': 'Parks', 'description': 'Issues related to parks and recreational areas'},
]

DEFAULT_REGIONS = [
    {'name': 'Zone A', 'type': RegionType.URBAN, 'population': 125000, 'area': 24.5,
     'latitude': 37.7749, 'longitude': -122.4194},
    {'name': 'Zone B', 'type': RegionType.SUBURBAN, 'population': 85000, 'area': 32.7,
     'latitude': 37.7833, 'longitude': -122.4167},
    {'name': 'Zone C', 'type': RegionType.RURAL, 'population': 35000, 'area': 78.3,
     'latitude': 37.8044, 'longitude': -122.2711},
]


@transaction.atomic
def create_default_categories():
    """Insert the default categories when the table is empty. Returns how many were created."""
    if Category.all_objects.exists():
        return 0
    Category.objects.bulk_create(Category(**data) for data in DEFAULT_CATEGORIES)
    logger.info("Default categories created")
    return len(DEFAULT_CATEGORIES)


@transaction.atomic
def create_default_regions():
    """Insert the default regions when the table is empty. Returns how many were created."""
    if Region.all_objects.exists():
        return 0
    Region.objects.bulk_create(Region(**data) for data in DEFAULT_REGIONS)
    logger.info("Default regions created")
    return len(DEFAULT_REGIONS)
