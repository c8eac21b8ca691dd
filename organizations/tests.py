"""
Tests for RBAC branch scoping and permission decorators
"""
from django.contrib.auth.models import AnonymousUser, User
from django.test import RequestFactory, TestCase

from accounts.models import Customer
from orders.models import Order
from organizations.models import AdminUser, Branch, Role
from organizations.rbac import (
    api_permission_required, get_user_branch_ids, get_user_branches,
    get_user_orders, is_admin, scope_orders,
)


class BranchScopeTest(TestCase):
    """Branch access for admins, managers and unassigned staff"""

    def setUp(self):
        self.bole = Branch.objects.create(name='Bole')
        self.piassa = Branch.objects.create(name='Piassa')
        self.closed = Branch.objects.create(name='Closed', is_active=False)

        self.admin_role = Role.objects.create(name=Role.ADMIN)
        self.manager_role = Role.objects.create(name=Role.BRANCH_MANAGER, can_send_campaigns=True)

        self.superuser = User.objects.create_superuser('root', 'root@example.com', 'password')

        self.admin_user = User.objects.create_user('admin', 'admin@example.com', 'password')
        AdminUser.objects.create(user=self.admin_user, role=self.admin_role)

        self.manager = User.objects.create_user('manager', 'manager@example.com', 'password')
        profile = AdminUser.objects.create(user=self.manager, role=self.manager_role)
        profile.branches.add(self.bole, self.closed)

        self.unassigned = User.objects.create_user('cashier', 'cashier@example.com', 'password')
        AdminUser.objects.create(user=self.unassigned, role=self.manager_role)

        self.no_profile = User.objects.create_user('guest', 'guest@example.com', 'password')

        customer = Customer.objects.create(name='Sara', phone='+251911000111')
        self.bole_order = Order.objects.create(customer=customer, branch=self.bole, total_amount=100)
        self.piassa_order = Order.objects.create(customer=customer, branch=self.piassa, total_amount=50)

    def test_admin_equivalents_are_unrestricted(self):
        self.assertTrue(is_admin(self.superuser))
        self.assertTrue(is_admin(self.admin_user))
        self.assertIsNone(get_user_branch_ids(self.superuser))
        self.assertIsNone(get_user_branch_ids(self.admin_user))
        self.assertEqual(get_user_orders(self.admin_user).count(), 2)

    def test_manager_sees_only_active_assigned_branches(self):
        self.assertFalse(is_admin(self.manager))
        self.assertEqual(get_user_branch_ids(self.manager), [self.bole.pk])
        self.assertEqual(list(get_user_orders(self.manager)), [self.bole_order])
        self.assertEqual(list(get_user_branches(self.manager)), [self.bole])

    def test_staff_without_branches_sees_nothing(self):
        self.assertEqual(get_user_branch_ids(self.unassigned), [])
        self.assertFalse(get_user_orders(self.unassigned).exists())
        self.assertFalse(get_user_branches(self.unassigned).exists())

    def test_users_without_profile_see_nothing(self):
        self.assertEqual(get_user_branch_ids(self.no_profile), [])
        self.assertFalse(get_user_orders(self.no_profile).exists())
        self.assertFalse(is_admin(AnonymousUser()))

    def test_scope_through_related_field(self):
        customers = scope_orders(Customer.objects.all(), self.manager, field='orders__branch').distinct()
        self.assertEqual(customers.count(), 1)

    def test_master_permission_grants_marketing_permissions(self):
        role = Role.objects.create(name='marketing_lead', can_manage_marketing=True)
        self.assertTrue(role.has_effective_permission('can_send_campaigns'))
        self.assertTrue(role.has_effective_permission('can_manage_templates'))
        self.assertFalse(self.manager_role.has_effective_permission('can_manage_templates'))


class ApiPermissionDecoratorTest(TestCase):

    def setUp(self):
        self.factory = RequestFactory()
        self.role = Role.objects.create(name=Role.CASHIER)
        self.user = User.objects.create_user('cashier', 'cashier@example.com', 'password')
        AdminUser.objects.create(user=self.user, role=self.role)

        @api_permission_required('can_send_campaigns')
        def view(request):
            return 'ok'

        self.view = view

    def test_missing_permission_returns_403(self):
        request = self.factory.get('/')
        request.user = self.user
        response = self.view(request)
        self.assertEqual(response.status_code, 403)

    def test_granted_permission_calls_view(self):
        self.role.can_send_campaigns = True
        self.role.save()
        request = self.factory.get('/')
        request.user = User.objects.get(pk=self.user.pk)
        self.assertEqual(self.view(request), 'ok')
