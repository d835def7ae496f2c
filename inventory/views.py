"""
Server-rendered inventory page.
"""
from __future__ import annotations

from django.contrib.auth.decorators import login_required
from django.core.paginator import Paginator
from django.http import HttpRequest, HttpResponse
from django.shortcuts import render

from inventory.models import UserInventory


@login_required
def inventory_page(request: HttpRequest) -> HttpResponse:
    """Shows the imported inventory, its sync state and the resume/consent prompts."""
    inventory = UserInventory.objects.filter(user=request.user).first()
    context = {'inventory': inventory, 'page_obj': None}

    if inventory is not None:
        paginator = Paginator(inventory.items.select_related('item'), 60)
        context['page_obj'] = paginator.get_page(request.GET.get('page'))
        if inventory.can_resume:
            context['resume_message'] = f"Resuming from {inventory.items_imported_count:,} items"

    return render(request, "inventory/inventory.html", context)
