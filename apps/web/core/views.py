"""
Public entry point.
"""

from django.http import HttpRequest, HttpResponse
from django.shortcuts import render
from django.views.decorators.http import require_GET


@require_GET
def home(request: HttpRequest) -> HttpResponse:
    """
    GET /

    Where signed-out visitors and finished orders land. Menus are reached
    through each restaurant's own link (the QR code on the table).
    """
    return render(request, "core/home.html")
