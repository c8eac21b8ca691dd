"""
Marketing Views for the staff dashboard

JSON endpoints for templates and audience preview, and form posts for
sending promo campaigns, maintaining the SMS phone lists and importing
customer contacts.
"""
import logging

from django.contrib import messages
from django.contrib.auth.decorators import login_required
from django.http import JsonResponse
from django.shortcuts import get_object_or_404, redirect
from django.utils.http import url_has_allowed_host_and_scheme
from django.views.decorators.http import require_GET, require_http_methods, require_POST

from organizations.rbac import api_permission_required, permission_required
from .audience import AudienceRangeError
from .broadcast_service import CampaignDispatcher, CampaignError, NO_MATCH_MESSAGE
from .contact_import import import_contacts
from .forms import (
    ContactImportForm, PromoAudienceForm, SendPromoCampaignForm,
    SmsPhoneListForm, SmsTemplateForm,
)
from .models import SmsPhoneList, SmsTemplate
from .preview_service import preview_audience
from .template_service import SmsTemplateService

logger = logging.getLogger(__name__)


def _redirect_back(request):
    referer = request.META.get('HTTP_REFERER')
    if referer and url_has_allowed_host_and_scheme(
        referer, allowed_hosts={request.get_host()}, require_https=request.is_secure()
    ):
        return redirect(referer)
    return redirect('admin:index')


def _flash_form_errors(request, form):
    for field, errors in form.errors.items():
        for error in errors:
            messages.error(request, error if field == '__all__' else f"{field}: {error}")


@login_required
@api_permission_required('can_send_campaigns')
@require_GET
def template_list(request):
    service = SmsTemplateService()
    include_inactive = request.GET.get('include_inactive') in ('1', 'true', 'yes')
    return JsonResponse({
        'templates': service.templates(include_inactive=include_inactive),
        'placeholders': service.placeholders(),
    })


@login_required
@permission_required('can_manage_templates')
@require_POST
def template_update(request, template_id):
    template = get_object_or_404(SmsTemplate, pk=template_id)
    form = SmsTemplateForm(request.POST, instance=template)

    if form.is_valid():
        form.save()
        messages.success(request, "SMS template updated.")
    else:
        _flash_form_errors(request, form)

    return _redirect_back(request)


@login_required
@api_permission_required('can_send_campaigns')
@require_http_methods(['GET', 'POST'])
def campaign_preview(request):
    form = PromoAudienceForm(request.POST if request.method == 'POST' else request.GET)
    if not form.is_valid():
        return JsonResponse({
            'message': 'The given data was invalid.',
            'errors': form.errors.get_json_data(),
        }, status=422)

    try:
        payload = preview_audience(request.user, form.to_filter_spec())
    except AudienceRangeError as e:
        return JsonResponse({'message': e.message}, status=422)

    return JsonResponse(payload)


@login_required
@permission_required('can_send_campaigns')
@require_POST
def campaign_send(request):
    form = SendPromoCampaignForm(request.POST)
    if not form.is_valid():
        _flash_form_errors(request, form)
        return _redirect_back(request)

    try:
        result = CampaignDispatcher().send_campaign(
            request.user,
            form.to_filter_spec(),
            form.cleaned_data['message'],
            form.campaign_options(),
        )
    except (AudienceRangeError, CampaignError) as e:
        messages.error(request, str(e))
        return _redirect_back(request)

    if not result.matched:
        messages.error(request, NO_MATCH_MESSAGE)
    else:
        messages.success(request, result.summary_message())
    return _redirect_back(request)


@login_required
@permission_required('can_manage_templates')
@require_POST
def phone_list_store(request):
    form = SmsPhoneListForm(request.POST)
    if form.is_valid():
        form.save()
        messages.success(request, "Phone list updated.")
    else:
        _flash_form_errors(request, form)
    return _redirect_back(request)


@login_required
@permission_required('can_manage_templates')
@require_POST
def phone_list_delete(request, entry_id):
    entry = get_object_or_404(SmsPhoneList, pk=entry_id)
    entry.delete()
    messages.success(request, "Phone list entry removed.")
    return _redirect_back(request)


@login_required
@permission_required('can_view_customers')
@require_POST
def contacts_import(request):
    form = ContactImportForm(request.POST, request.FILES)
    if not form.is_valid():
        messages.error(request, "No file uploaded.")
        return _redirect_back(request)

    try:
        result = import_contacts(form.cleaned_data['file'])
    except UnicodeDecodeError:
        messages.error(request, "Unable to read uploaded file.")
        return _redirect_back(request)

    messages.success(request, result.summary_message())
    return _redirect_back(request)
