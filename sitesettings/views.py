import logging

from django.contrib import messages
from django.shortcuts import redirect, render
from django.views.decorators.http import require_http_methods

from accounts.decorators import admin_required
from sitesettings import services
from sitesettings.forms import LogoUploadForm

logger = logging.getLogger(__name__)


@admin_required
@require_http_methods(["GET", "POST"])
def settings_page(request):
    form = LogoUploadForm(request.POST or None, request.FILES or None)
    if request.method == "POST":
        if form.is_valid():
            try:
                services.upload_logo(form.cleaned_data["logo"], request.user)
            except OSError:
                logger.exception("Error uploading logo")
                messages.error(request, "Erreur lors du téléversement du logo")
            else:
                messages.success(request, "Logo mis à jour avec succès")
                return redirect("sitesettings:settings")
        else:
            for error in form.errors.get("logo", []):
                messages.error(request, error)
    return render(request, "sitesettings/settings.html", {"form": form})
