"""
URL configuration for CivicPulse Backend.

API Structure:
- /api/auth/         - Registration, login, session
- /api/users/        - User administration
- /api/reports/      - Report lifecycle, timeline, analytics
- /api/departments/  - Department catalogue
- /api/regions/      - Region catalogue
- /api/categories/   - Report categories
- /uploads/          - Report photos
- /admin/            - Django admin
"""

from django.conf import settings
from django.contrib import admin
from django.http import JsonResponse
from django.urls import include, path, re_path
from django.views.static import serve


def health_check(request):
    """Health check endpoint for load balancers."""
    return JsonResponse({
        'status': 'healthy',
        'service': 'civicpulse-backend'
    })


def api_root(request):
    """API root endpoint listing the resource collections."""
    return JsonResponse({
        'name': 'CivicPulse API',
        'endpoints': {
            'auth': '/api/auth/',
            'users': '/api/users/',
            'reports': '/api/reports/',
            'departments': '/api/departments/',
            'regions': '/api/regions/',
            'categories': '/api/categories/',
        }
    })


urlpatterns = [
    path('health/', health_check, name='health-check'),
    path('api/health/', health_check, name='api-health-check'),

    path('api/', api_root, name='api-root'),

    path('api/auth/', include('authentication.urls', namespace='authentication')),
    path('api/users/', include('authentication.user_urls', namespace='users')),
    path('api/reports/', include('reports.urls', namespace='reports')),
    path('api/departments/', include('organization.department_urls', namespace='departments')),
    path('api/regions/', include('organization.region_urls', namespace='regions')),
    path('api/categories/', include('organization.category_urls', namespace='categories')),

    path('admin/', admin.site.urls),
]

# Report photos are public, like the rest of a report
if settings.SERVE_UPLOADS:
    prefix = settings.UPLOADS_URL.lstrip('/')
    urlpatterns += [
        re_path(rf'^{prefix}(?P<path>.*)$', serve, {'document_root': settings.FILE_UPLOAD_PATH}),
    ]

handler404 = 'core.views.not_found'
