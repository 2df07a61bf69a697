from django.urls import path

from accounts import bridges, views

app_name = "accounts"

urlpatterns = [
    path("login/", views.login_view, name="login"),
    path("admin/login/", views.login_view),
    path("producer/login/", views.login_view),
    path("logout/", views.logout_view, name="logout"),
    path("admin/admins/", views.admins_list, name="admins"),
    path("admin/admins/<int:pk>/delete/", views.admin_delete, name="admin-delete"),
    path("producer/forgot-password/", views.forgot_password, name="forgot-password"),
    path("emergency-reset/", views.emergency_reset, name="emergency-reset"),
    path("admin/quick-reset/", views.emergency_reset),
    path("reset/<uidb64>/<token>/", views.RecoveryConfirmView.as_view(), name="password-reset-confirm"),
    path("functions/v1/admin-reset-password", bridges.admin_reset_password, name="admin-reset-password"),
    path("functions/v1/generate-reset-link", bridges.generate_reset_link, name="generate-reset-link"),
]
