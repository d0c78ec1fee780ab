"""
Services for report handling.

Includes:
- LocationResolverService: reverse geocoding via OpenStreetMap Nominatim
- PhotoStorageService: validation and storage of report photos
"""

import logging
import os
import time

import requests
from django.conf import settings
from django.core.files.storage import FileSystemStorage

from core.exceptions import BadRequestError, PhotoUploadError

logger = logging.getLogger(__name__)


class LocationResolverService:
    """
    Resolves a street address from GPS coordinates using OpenStreetMap Nominatim.

    Nominatim API: https://nominatim.openstreetmap.org/reverse

    - 3-second timeout, report creation never waits longer
    - Returns None on any failure; resolve_address() falls back to "lat, lng"
    - Disabled entirely with GEOCODING_ENABLED=False (tests, offline installs)
    """

    NOMINATIM_API = "https://nominatim.openstreetmap.org/reverse"
    TIMEOUT_SECONDS = 3
    ZOOM_LEVEL = 18
    USER_AGENT = 'CivicPulse/1.0'

    @staticmethod
    def resolve_area_name(latitude, longitude):
        """
        Resolve a readable area name from coordinates.

        Returns:
            str: e.g. "Market Street, Financial District, San Francisco"
            None if resolution fails
        """
        if latitude is None or longitude is None:
            return None

        lat = float(latitude)
        lon = float(longitude)
        if not (-90 <= lat <= 90 and -180 <= lon <= 180):
            logger.warning(f"Invalid coordinates: lat={lat}, lon={lon}")
            return None

        params = {
            'format': 'json',
            'lat': lat,
            'lon': lon,
            'zoom': LocationResolverService.ZOOM_LEVEL,
            'addressdetails': 1,
        }

        logger.info(f"[LocationResolver] Resolving {lat}, {lon}")

        try:
            response = requests.get(
                LocationResolverService.NOMINATIM_API,
                params=params,
                timeout=LocationResolverService.TIMEOUT_SECONDS,
                headers={'User-Agent': LocationResolverService.USER_AGENT},
            )
            response.raise_for_status()
            data = response.json()
        except requests.Timeout:
            logger.warning(f"[LocationResolver] Nominatim API timeout for {lat}, {lon}")
            return None
        except requests.RequestException as e:
            logger.warning(f"[LocationResolver] Nominatim API error: {e}")
            return None
        except ValueError as e:
            logger.warning(f"[LocationResolver] Invalid Nominatim response: {e}")
            return None

        address = data.get('address') or {}

        # Priority: house number + road -> neighbourhood -> suburb -> city
        parts = []
        road = address.get('road')
        if road and address.get('house_number'):
            road = f"{address['house_number']} {road}"
        for value in (road, address.get('neighbourhood'), address.get('suburb'),
                      address.get('city') or address.get('town') or address.get('village')):
            if value:
                parts.append(value)

        if not parts:
            display_name = data.get('display_name')
            if display_name:
                return display_name
            logger.warning(f"[LocationResolver] No address found for {lat}, {lon}")
            return None

        area_name = ', '.join(parts[:3])
        logger.info(f"[LocationResolver] Resolved: {area_name}")
        return area_name

    @classmethod
    def resolve_address(cls, latitude, longitude):
        """Address for a new report; never fails."""
        resolved = None
        if settings.GEOCODING_ENABLED:
            resolved = cls.resolve_area_name(latitude, longitude)
        return resolved or f"{latitude}, {longitude}"


class PhotoStorageService:
    """
    Stores report photos as ``photo_<reportId>_<epochMillis><ext>`` under
    FILE_UPLOAD_PATH and returns their public ``/uploads/<file>`` path.
    """

    @staticmethod
    def is_image(upload):
        content_type = getattr(upload, 'content_type', '') or ''
        return content_type.startswith('image')

    @classmethod
    def validate(cls, upload):
        if not cls.is_image(upload):
            raise BadRequestError('Please upload an image file')
        if upload.size > settings.MAX_FILE_UPLOAD:
            raise BadRequestError(
                f'Please upload an image less than {settings.MAX_FILE_UPLOAD} bytes'
            )

    @staticmethod
    def store(report, upload):
        """
        Write ``upload`` to disk and return its URL path.

        Raises PhotoUploadError (500) when the file cannot be written.
        """
        extension = os.path.splitext(upload.name or '')[1].lower()
        filename = f"photo_{report.pk}_{int(time.time() * 1000)}{extension}"
        storage = FileSystemStorage(
            location=settings.FILE_UPLOAD_PATH,
            base_url=settings.UPLOADS_URL,
        )
        try:
            saved_name = storage.save(filename, upload)
        except OSError as e:
            logger.error(f"Photo upload failed for report {report.pk}: {e}", exc_info=True)
            raise PhotoUploadError()

        logger.info(f"Stored photo {saved_name} for report {report.pk}")
        return f"{settings.UPLOADS_URL}{saved_name}"

    @classmethod
    def store_images(cls, report, uploads):
        """Store every image among ``uploads``; other files are skipped."""
        urls = []
        for upload in uploads:
            if not cls.is_image(upload):
                logger.info(f"Skipping non-image upload {upload.name} for report {report.pk}")
                continue
            urls.append(cls.store(report, upload))
        return urls
