from django.urls import path

from .views import AreaListView, LocationListView, PersonListView, ResolveAreaView

urlpatterns = [
    path("", LocationListView.as_view(), name="location-list"),
    path("areas/", AreaListView.as_view(), name="location-area-list"),
    path("resolve/", ResolveAreaView.as_view(), name="location-resolve"),
    path("people/", PersonListView.as_view(), name="person-list"),
]

# EOF
