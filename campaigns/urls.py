from django.urls import path

from campaigns import views

app_name = "campaigns"

urlpatterns = [
    path("admin/templates/", views.template_list, name="templates"),
    path("admin/templates/new/", views.template_edit, name="template-create"),
    path("admin/templates/<int:pk>/", views.template_edit, name="template-edit"),
    path("admin/templates/<int:pk>/preview/", views.template_preview, name="template-preview"),
    path("admin/templates/<int:pk>/delete/", views.template_delete, name="template-delete"),
    path("admin/campaigns/", views.campaign_list, name="campaigns"),
    path("admin/campaigns/create/", views.campaign_create, name="campaign-create"),
]
