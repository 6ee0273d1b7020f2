# ===============================================================================
# DASHBOARD AUTHENTICATION VIEWS - MAGIC LINK, CONNECT, ORGANIZATIONS 🔐
# ===============================================================================

import logging

from django.contrib import messages
from django.http import HttpRequest, HttpResponse, JsonResponse
from django.shortcuts import redirect
from django.utils.http import url_has_allowed_host_and_scheme
from django.utils.translation import gettext as _
from django.views.decorators.http import require_http_methods

from apps.api_client.services import SESSION_TOKEN_KEY
from apps.common.decorators import handle_api_errors, require_dispatch_session, wants_json
from apps.common.payloads import read_payload
from apps.common.toasts import toast_success
from apps.notifications.state import reset_poll_states
from apps.users.middleware import replace_session_token, store_dispatch_login
from apps.users.services import AuthService, SessionRefresher

logger = logging.getLogger(__name__)

JWT_PREFIX = 'eyJ'


def _safe_next(request: HttpRequest, default: str) -> str:
    next_url = request.GET.get('next') or ''
    if next_url and url_has_allowed_host_and_scheme(next_url, allowed_hosts={request.get_host()}):
        return next_url
    return default


def _landing_url(connected: bool) -> str:
    return '/dashboard/' if connected else '/connect/'


# ===============================================================================
# SIGN-IN 📧
# ===============================================================================

@require_http_methods(["GET", "POST"])
def login_view(request: HttpRequest) -> HttpResponse:
    """
    📧 Magic link sign-in

    GET reports whether the browser already holds a session.
    POST {email} asks the Dispatch API to mail a sign-in link.
    """
    if request.method == 'GET':
        if request.session.get(SESSION_TOKEN_KEY):
            return redirect(_safe_next(request, '/dashboard/'))
        return JsonResponse({'authenticated': False})

    email = (read_payload(request).get('email') or '').strip()
    if not email:
        return JsonResponse({'sent': False, 'error': _('Email is required')}, status=400)

    sent = AuthService().send_magic_link(email)
    if sent:
        toast_success(request, _('Check your email for a sign-in link.'))
    else:
        messages.error(request, _('Failed to send magic link. Please try again.'))
    return JsonResponse({'sent': sent}, status=200 if sent else 502)


@require_http_methods(["GET"])
def auth_callback_view(request: HttpRequest) -> HttpResponse:
    """
    🔑 Magic link landing

    Accepts `?sessionToken=` (already verified upstream), a JWT passed as
    `?token=`, or a one-time magic-link `?token=` that must be exchanged.
    """
    error = request.GET.get('error')
    if error:
        logger.warning(f"⚠️ [Auth] Sign-in callback returned error: {error}")
        messages.error(request, _('Authentication failed'))
        return redirect('/login/?error=auth_failed')

    auth_service = AuthService()
    token = request.GET.get('token') or ''
    session_token = request.GET.get('sessionToken') or ''
    if not session_token and token.startswith(JWT_PREFIX):
        session_token = token

    if session_token:
        session = auth_service.refresh_session(session_token)
        if session is None:
            messages.error(request, _('Session validation failed.'))
            return redirect('/login/?error=invalid_session')
        store_dispatch_login(request, session_token, session)
    elif token:
        login = auth_service.verify_token(token)
        if login is None:
            messages.error(request, _('This sign-in link is invalid or has expired.'))
            return redirect('/login/?error=invalid_link')
        session = login.session
        store_dispatch_login(request, login.session_token, session)
    else:
        return redirect('/login/')

    logger.info(f"✅ [Auth] Signed in {session.email} (connected={session.connected})")
    toast_success(request, _('Successfully signed in!'))
    return redirect(_landing_url(session.connected))


# ===============================================================================
# ORGANIZATION CONNECTION 🔗
# ===============================================================================

@require_http_methods(["GET", "POST"])
@require_dispatch_session
def connect_view(request: HttpRequest) -> HttpResponse:
    """🔗 Connect the signed-in user to an organization with an API key"""
    session = request.dispatch_session
    if request.method == 'GET':
        return JsonResponse({'connected': session.connected, 'email': session.email})

    api_key = (read_payload(request).get('api_key') or '').strip()
    if not api_key:
        return JsonResponse({'connected': False, 'error': _('API key is required')}, status=400)

    token = request.dispatch_token
    if not AuthService().connect_api_key(token, api_key):
        messages.error(request, _('Invalid API key.'))
        return JsonResponse({'connected': False, 'error': _('Invalid API key')}, status=400)

    # Pick up the new organization immediately instead of at the next revalidation
    refresher = SessionRefresher()
    refresher.invalidate(token)
    refreshed = refresher.auth_service.refresh_session(token)
    if refreshed is not None:
        replace_session_token(request, token, refreshed)
    toast_success(request, _('Organization connected.'))
    return JsonResponse({'connected': True, 'redirect': '/dashboard/'})


@require_http_methods(["GET", "POST"])
def logout_view(request: HttpRequest) -> HttpResponse:
    """🚪 Forget the bearer token and end the dashboard session"""
    token = request.session.get(SESSION_TOKEN_KEY)
    if token:
        SessionRefresher().invalidate(token)
    reset_poll_states(request)
    request.session.flush()
    logger.info("🚪 [Auth] Signed out")
    if wants_json(request):
        return JsonResponse({'success': True})
    return redirect('/login/')


# ===============================================================================
# SESSION & ORGANIZATIONS 🏢
# ===============================================================================

@require_http_methods(["GET"])
@require_dispatch_session
def session_view(request: HttpRequest) -> JsonResponse:
    session = request.dispatch_session
    return JsonResponse({
        'authenticated': True,
        'connected': session.connected,
        'session': session.to_dict(),
    })


@require_http_methods(["GET"])
@require_dispatch_session
@handle_api_errors
def organizations_view(request: HttpRequest) -> JsonResponse:
    organizations = AuthService().list_organizations(request.dispatch_token)
    current = request.dispatch_session.organization_id
    return JsonResponse({
        'data': [
            {'id': org.id, 'name': org.name, 'current': org.id == current}
            for org in organizations
        ],
    })


@require_http_methods(["POST"])
@require_dispatch_session
@handle_api_errors
def switch_organization_view(request: HttpRequest) -> JsonResponse:
    """
    🏢 Switch the active organization

    Every cached query belongs to the previous organization, so per-session
    notification snapshots are reset along with the session itself.
    """
    organization_id = (read_payload(request).get('organization_id') or '').strip()
    if not organization_id:
        return JsonResponse({'error': _('organization_id is required')}, status=400)

    session = request.dispatch_session
    if organization_id == session.organization_id:
        return JsonResponse({'switched': False, 'session': session.to_dict()})

    old_token = request.dispatch_token
    auth_service = AuthService()
    new_token = auth_service.switch_organization(old_token, organization_id, session.organization_id)

    refresher = SessionRefresher(auth_service)
    refresher.invalidate(old_token)
    refreshed = auth_service.refresh_session(new_token)
    if refreshed is None:
        request.session.flush()
        return JsonResponse({'error': _('Session validation failed')}, status=401)

    replace_session_token(request, new_token, refreshed)
    reset_poll_states(request)
    toast_success(request, _('Organization switched.'))
    return JsonResponse({'switched': True, 'session': refreshed.to_dict()})
