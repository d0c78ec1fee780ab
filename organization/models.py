"""
Organization catalogue models for CivicPulse Backend.

Contains:
- Department: municipal department that reports and officers belong to
- Region: administrative zone with population/area and a GeoJSON outline
- Category: kind of issue a citizen can report
"""

from django.core.validators import MinValueValidator
from django.db import models

from core.models import BaseModel


class CatalogueStatus:
    """Active/inactive flag shared by departments, regions and categories."""
    ACTIVE = 'active'
    INACTIVE = 'inactive'

    CHOICES = [
        (ACTIVE, 'Active'),
        (INACTIVE, 'Inactive'),
    ]


class RegionType:
    URBAN = 'Urban'
    SUBURBAN = 'Suburban'
    RURAL = 'Rural'
    INDUSTRIAL = 'Industrial'
    COMMERCIAL = 'Commercial'
    RESIDENTIAL = 'Residential'

    CHOICES = [
        (URBAN, 'Urban'),
        (SUBURBAN, 'Suburban'),
        (RURAL, 'Rural'),
        (INDUSTRIAL, 'Industrial'),
        (COMMERCIAL, 'Commercial'),
        (RESIDENTIAL, 'Residential'),
    ]


def empty_polygon():
    return {'type': 'Polygon', 'coordinates': []}


# =============================================================================
# DEPARTMENT
# =============================================================================

class Department(BaseModel):
    """A municipal department (roads, water, sanitation, ...)."""

    name = models.CharField(max_length=100, unique=True)
    description = models.TextField()
    head_officer = models.CharField(max_length=100)
    headquarters = models.CharField(max_length=255)

    location_address = models.CharField(max_length=255, blank=True)
    latitude = models.FloatField(null=True, blank=True)
    longitude = models.FloatField(null=True, blank=True)

    officers_count = models.PositiveIntegerField(default=0)
    contact_email = models.EmailField(blank=True)
    contact_phone = models.CharField(max_length=30, blank=True)

    status = models.CharField(
        max_length=10,
        choices=CatalogueStatus.CHOICES,
        default=CatalogueStatus.ACTIVE,
        db_index=True
    )

    class Meta:
        db_table = 'departments'
        ordering = ['name']

    def __str__(self):
        return self.name


# =============================================================================
# REGION
# =============================================================================

class Region(BaseModel):
    """
    An administrative zone.

    ``boundaries`` holds a GeoJSON Polygon ({"type": "Polygon",
    "coordinates": [[[lng, lat], ...]]}) for map overlays.
    """

    name = models.CharField(max_length=100, unique=True)
    type = models.CharField(max_length=20, choices=RegionType.CHOICES)
    population = models.PositiveIntegerField()
    area = models.FloatField(
        validators=[MinValueValidator(0)],
        help_text="Area in square kilometres"
    )

    latitude = models.FloatField()
    longitude = models.FloatField()
    boundaries = models.JSONField(default=empty_polygon, blank=True)

    status = models.CharField(
        max_length=10,
        choices=CatalogueStatus.CHOICES,
        default=CatalogueStatus.ACTIVE,
        db_index=True
    )

    class Meta:
        db_table = 'regions'
        ordering = ['name']

    def __str__(self):
        return self.name


# =============================================================================
# CATEGORY
# =============================================================================

class Category(BaseModel):
    """Kind of issue (Road, Water, ...). Deleting one only deactivates it."""

    name = models.CharField(max_length=100, unique=True)
    description = models.TextField()

    status = models.CharField(
        max_length=10,
        choices=CatalogueStatus.CHOICES,
        default=CatalogueStatus.ACTIVE,
        db_index=True
    )

    class Meta:
        db_table = 'categories'
        verbose_name_plural = 'Categories'
        ordering = ['name']

    def __str__(self):
        return self.name

    def deactivate(self):
        self.status = CatalogueStatus.INACTIVE
        self.save(update_fields=['status', 'updated_at'])
