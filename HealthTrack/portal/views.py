import functools
import logging

from django.contrib import messages
from django.http import Http404
from django.shortcuts import redirect, render
from django.urls import reverse
from django.utils.http import url_has_allowed_host_and_scheme
from django.views.decorators.http import require_POST

from .api import APIError, get_api
from .forms import ClientForm, ClientSearchForm, EnrollmentForm, ProgramForm

logger = logging.getLogger('healthtrack.portal')


def handle_api_errors(view):
    """Turn API 404s into Http404 and an unreachable API into an error page."""
    @functools.wraps(view)
    def wrapper(request, *args, **kwargs):
        try:
            return view(request, *args, **kwargs)
        except APIError as e:
            if e.status_code == 404:
                raise Http404(e.message)
            logger.error(f"Portal view {view.__name__} failed: {e.message}")
            status = 503 if e.status_code == 0 else 502
            return render(request, 'portal/error.html', {'message': e.message}, status=status)
    return wrapper


def _next_url(request, fallback):
    target = request.POST.get('next') or request.GET.get('next')
    if target and url_has_allowed_host_and_scheme(target, allowed_hosts={request.get_host()}):
        return target
    return fallback


@handle_api_errors
def dashboard(request):
    api = get_api()
    clients = api.get_clients()
    programs = api.get_programs()
    enrollments = api.get_enrollments()
    return render(request, 'portal/dashboard.html', {
        'total_clients': len(clients),
        'total_programs': len(programs),
        'total_enrollments': len(enrollments),
        'recent_enrollments': enrollments[:5],
    })


# Programs

@handle_api_errors
def program_list(request):
    return render(request, 'portal/program_list.html', {'programs': get_api().get_programs()})


@handle_api_errors
def program_detail(request, program_id):
    return render(request, 'portal/program_detail.html', {'program': get_api().get_program(program_id)})


@handle_api_errors
def program_form(request, program_id=None):
    """Create a program, or edit one when ``program_id`` is given."""
    api = get_api()
    if request.method == 'POST':
        form = ProgramForm(request.POST)
        if form.is_valid():
            try:
                if program_id:
                    program = api.update_program(program_id, form.cleaned_data)
                else:
                    program = api.create_program(form.cleaned_data)
            except APIError as e:
                if e.status_code != 400:
                    raise
                messages.error(request, e.message)
            else:
                messages.success(request, f"Program '{program['name']}' saved.")
                return redirect('portal:program-detail', program_id=program['id'])
    elif program_id:
        program = api.get_program(program_id)
        form = ProgramForm(initial={'name': program['name'], 'description': program.get('description') or ''})
    else:
        form = ProgramForm()
    return render(request, 'portal/program_form.html', {'form': form, 'program_id': program_id})


@require_POST
@handle_api_errors
def program_delete(request, program_id):
    try:
        get_api().delete_program(program_id)
    except APIError as e:
        if e.status_code != 400:
            raise
        count = (e.payload or {}).get('count')
        suffix = f" ({count} enrolled)" if count else ''
        messages.error(request, f"{e.message}{suffix}")
        return redirect('portal:program-detail', program_id=program_id)
    messages.success(request, 'Program deleted.')
    return redirect('portal:program-list')


# Clients

@handle_api_errors
def client_list(request):
    return render(request, 'portal/client_list.html', {'clients': get_api().get_clients()})


@handle_api_errors
def client_search(request):
    form = ClientSearchForm(request.GET or None)
    results = None
    if form.is_valid():
        results = get_api().search_clients(form.cleaned_data['name'])
    return render(request, 'portal/client_search.html', {'form': form, 'results': results})


@handle_api_errors
def client_detail(request, client_id):
    return render(request, 'portal/client_detail.html', {'client': get_api().get_client(client_id)})


@handle_api_errors
def client_form(request, client_id=None):
    """Create a client, or edit one when ``client_id`` is given."""
    api = get_api()
    if request.method == 'POST':
        form = ClientForm(request.POST)
        if form.is_valid():
            try:
                if client_id:
                    client = api.update_client(client_id, form.cleaned_data)
                else:
                    client = api.create_client(form.cleaned_data)
            except APIError as e:
                if e.status_code != 400:
                    raise
                messages.error(request, e.message)
            else:
                messages.success(request, f"Client '{client['name']}' saved.")
                return redirect('portal:client-detail', client_id=client['id'])
    elif client_id:
        client = api.get_client(client_id)
        form = ClientForm(initial={field: client.get(field) for field in ClientForm.base_fields})
    else:
        form = ClientForm()
    return render(request, 'portal/client_form.html', {'form': form, 'client_id': client_id})


@require_POST
@handle_api_errors
def client_delete(request, client_id):
    get_api().delete_client(client_id)
    messages.success(request, 'Client and their enrollments deleted.')
    return redirect('portal:client-list')


# Enrollments

@handle_api_errors
def enroll_client(request, client_id):
    api = get_api()
    client = api.get_client(client_id)
    enrolled = {e['programId'] for e in client.get('enrollments', [])}
    available = [p for p in api.get_programs() if p['id'] not in enrolled]

    form = EnrollmentForm(request.POST or None, programs=available)
    if request.method == 'POST' and form.is_valid():
        try:
            created = api.create_bulk_enrollments(client_id, form.cleaned_data['programs'])
        except APIError as e:
            if e.status_code != 400:
                raise
            messages.error(request, e.message)
        else:
            messages.success(request, f"Enrolled in {len(created)} program(s).")
            return redirect('portal:client-detail', client_id=client_id)
    return render(request, 'portal/enrollment_form.html', {'client': client, 'form': form})


@require_POST
@handle_api_errors
def unenroll(request, client_id, program_id):
    get_api().remove_client_from_program(client_id, program_id)
    messages.success(request, 'Client removed from program.')
    return redirect(_next_url(request, fallback=reverse('portal:client-detail', kwargs={'client_id': client_id})))
