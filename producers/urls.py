from django.urls import path

from producers import views

app_name = "producers"

urlpatterns = [
    path("", views.landing, name="landing"),
    path("inscription/", views.register, name="register"),
    path("directory/", views.directory, name="directory"),
    path("producer/profile/", views.profile, name="profile"),
    path("admin/dashboard/", views.dashboard, name="dashboard"),
    path("admin/producers/<int:pk>/", views.producer_edit, name="producer-edit"),
    path("admin/producers/<int:pk>/visibility/", views.producer_toggle_visibility, name="producer-visibility"),
    path("admin/producers/<int:pk>/block/", views.producer_toggle_block, name="producer-block"),
    path("admin/producers/<int:pk>/delete/", views.producer_delete, name="producer-delete"),
    path("admin/import/", views.import_producers, name="import"),
    path("admin/import/template.csv", views.import_template, name="import-template"),
]
