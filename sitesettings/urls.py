from django.urls import path

from sitesettings import views

app_name = "sitesettings"

urlpatterns = [
    path("admin/settings/", views.settings_page, name="settings"),
]
