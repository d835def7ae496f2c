"""
Server-rendered loadout pages: the public gallery, a published loadout by
slug, the owner's editor and the "new loadout" form.
"""
from __future__ import annotations

from django.contrib import messages
from django.contrib.auth.decorators import login_required
from django.core.paginator import Paginator
from django.http import Http404, HttpRequest, HttpResponse
from django.shortcuts import get_object_or_404, redirect, render

from csloadout.errors import ServiceError
from loadouts import services
from loadouts.forms import LoadoutForm
from loadouts.models import Loadout
from loadouts.queries import GALLERY_SORTS, gallery_queryset


def gallery(request: HttpRequest) -> HttpResponse:
    sort = request.GET.get('sort', 'popular')
    if sort not in GALLERY_SORTS:
        sort = 'popular'
    queryset = gallery_queryset(sort, request.GET.get('min_budget'), request.GET.get('max_budget'))
    page_obj = Paginator(queryset, 24).get_page(request.GET.get('page'))
    return render(request, "loadouts/gallery.html", {
        'page_obj': page_obj,
        'sort': sort,
        'sorts': list(GALLERY_SORTS),
        'min_budget': request.GET.get('min_budget', ''),
        'max_budget': request.GET.get('max_budget', ''),
    })


def loadout_detail(request: HttpRequest, slug: str) -> HttpResponse:
    loadout = get_object_or_404(Loadout.objects.select_related('user'), slug=slug)
    is_owner = request.user.is_authenticated and loadout.user_id == request.user.pk
    if not loadout.is_public and not is_owner:
        raise Http404("Loadout not found")

    has_upvoted = (
        request.user.is_authenticated
        and loadout.upvote_records.filter(user=request.user).exists()
    )
    return render(request, "loadouts/detail.html", {
        'loadout': loadout,
        'items': loadout.items.select_related('item'),
        'allocation': services.loadout_allocation(loadout),
        'is_owner': is_owner,
        'has_upvoted': has_upvoted,
    })


@login_required
def loadout_manage(request: HttpRequest, loadout_id: int) -> HttpResponse:
    """Owner view with the allocation breakdown and the selected items."""
    try:
        loadout = services.get_owned_loadout(request.user, loadout_id)
    except ServiceError as e:
        raise Http404(e.message) from e
    return render(request, "loadouts/manage.html", {
        'loadout': loadout,
        'items': loadout.items.select_related('item'),
        'allocation': services.loadout_allocation(loadout),
    })


@login_required
def new_loadout(request: HttpRequest) -> HttpResponse:
    form = LoadoutForm(request.POST or None)
    if request.method == 'POST' and form.is_valid():
        try:
            loadout = services.create_loadout(request.user, **form.cleaned_data)
        except ServiceError as e:
            form.add_error(None, e.message)
        else:
            messages.success(request, f'Loadout "{loadout.name}" created.')
            return redirect('loadout_manage', loadout_id=loadout.pk)
    return render(request, "loadouts/new.html", {'form': form})
