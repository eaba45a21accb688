from django.urls import path

from .views import HomeView, LoginView, LogoutView, UserDetailView, UsersView

app_name = "users"

urlpatterns = [
    path("", HomeView.as_view(), name="home"),
    path("login/", LoginView.as_view(), name="login"),
    path("logout/", LogoutView.as_view(), name="logout"),
    path("users/", UsersView.as_view(), name="list"),
    path("users/<str:login>/", UserDetailView.as_view(), name="view"),
]
