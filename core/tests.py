import subprocess
import sys

from django.conf import settings
from django.db import IntegrityError
from django.http import QueryDict
from django.test import SimpleTestCase, TestCase
from rest_framework.exceptions import ValidationError
from rest_framework.request import Request
from rest_framework.test import APIRequestFactory

from organization.models import Category
from .exceptions import (
    InvalidStateError,
    NotFoundError,
    UnauthorizedError,
    custom_exception_handler,
)
from .filters import camel_to_snake, translate_query_params
from .pagination import EnvelopePagination


class QueryTranslationTests(SimpleTestCase):
    def test_camel_case_names_become_model_lookups(self):
        self.assertEqual(camel_to_snake('createdAt'), 'created_at')
        self.assertEqual(camel_to_snake('assignedOfficer'), 'assigned_officer')
        self.assertEqual(camel_to_snake('status'), 'status')

    def test_bracket_operators_are_translated(self):
        params = QueryDict('createdAt[gte]=2024-01-01&population[lt]=5000&status=Pending')
        translated = translate_query_params(params)

        self.assertEqual(translated['created_at__gte'], '2024-01-01')
        self.assertEqual(translated['population__lt'], '5000')
        self.assertEqual(translated['status'], 'Pending')

    def test_in_values_are_joined(self):
        params = QueryDict('severity[in]=High&severity[in]=Critical,Low')
        translated = translate_query_params(params)
        self.assertEqual(translated['severity__in'], 'High,Critical,Low')

    def test_reserved_and_unsupported_parameters_are_dropped(self):
        params = QueryDict('select=title&sort=-createdAt&page=2&limit=5&title[regex]=x&lat=1')
        translated = translate_query_params(params, reserved=('select', 'sort', 'page', 'limit', 'lat'))
        self.assertEqual(list(translated.keys()), [])


class EnvelopePaginationTests(TestCase):
    def setUp(self):
        for index in range(5):
            Category.objects.create(name=f'Category {index}', description='test')
        self.factory = APIRequestFactory()

    def paginate(self, query):
        paginator = EnvelopePagination()
        request = Request(self.factory.get(f'/api/categories/?{query}'))
        page = paginator.paginate_queryset(Category.objects.order_by('name'), request)
        return paginator, page

    def test_middle_page_has_next_and_prev(self):
        paginator, page = self.paginate('page=2&limit=2')
        response = paginator.get_paginated_response([c.name for c in page])

        self.assertEqual(response.data['data'], ['Category 2', 'Category 3'])
        self.assertEqual(response.data['count'], 2)
        self.assertEqual(response.data['total'], 5)
        self.assertEqual(response.data['pagination'], {
            'next': {'page': 3, 'limit': 2},
            'prev': {'page': 1, 'limit': 2},
        })

    def test_first_page_has_no_prev(self):
        paginator, page = self.paginate('limit=10')
        self.assertEqual(len(page), 5)
        self.assertEqual(paginator.get_pagination(), {})

    def test_page_past_the_end_is_empty(self):
        paginator, page = self.paginate('page=9&limit=2')
        self.assertEqual(page, [])
        self.assertNotIn('next', paginator.get_pagination())

    def test_invalid_values_fall_back_to_defaults(self):
        paginator, page = self.paginate('page=abc&limit=-3')
        self.assertEqual(paginator.page, 1)
        self.assertEqual(paginator.limit, EnvelopePagination.default_limit)


class ExceptionEnvelopeTests(SimpleTestCase):
    context = {'request': None, 'view': None}

    def test_domain_error_keeps_message_and_code(self):
        response = custom_exception_handler(NotFoundError('Report not found with id of 42'), self.context)

        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.data, {
            'success': False,
            'code': 'NOT_FOUND',
            'message': 'Report not found with id of 42',
        })

    def test_invalid_state_is_a_bad_request(self):
        response = custom_exception_handler(InvalidStateError('nope'), self.context)
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data['code'], 'INVALID_STATE')

    def test_unauthorized_is_401(self):
        response = custom_exception_handler(UnauthorizedError(), self.context)
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.data['message'], 'Not authorized to access this route')

    def test_field_errors_are_summarised(self):
        exc = ValidationError({'title': ['This field is required.']})
        response = custom_exception_handler(exc, self.context)

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data['message'], 'Validation error: title - This field is required.')
        self.assertIn('title', response.data['errors'])

    def test_integrity_error_is_a_duplicate(self):
        response = custom_exception_handler(IntegrityError('UNIQUE constraint failed'), self.context)
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data['message'], 'Duplicate field value entered')

    def test_unexpected_errors_do_not_leak(self):
        with self.assertLogs('core.exceptions', level='ERROR'):
            response = custom_exception_handler(RuntimeError('secret detail'), self.context)

        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.data['message'], 'Server Error')
        self.assertNotIn('secret', str(response.data))


class RoutingTests(TestCase):
    def test_health_check(self):
        response = self.client.get('/health/')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['status'], 'healthy')

    def test_unknown_route_returns_json_envelope(self):
        response = self.client.get('/api/reports/not-a-uuid/')
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json(), {
            'success': False,
            'code': 'NOT_FOUND',
            'message': 'Resource not found',
        })


class StartupTests(SimpleTestCase):
    def test_project_loads_in_a_fresh_interpreter(self):
        # Django setup imports audit.models, and through it core.exceptions,
        # before anything else has loaded the DRF views module.
        result = subprocess.run(
            [sys.executable, 'manage.py', 'check'],
            cwd=settings.BASE_DIR,
            capture_output=True,
            text=True,
        )

        self.assertEqual(result.returncode, 0, result.stderr)
