"""Admin registrations for locations app."""

from django.contrib import admin

from .models import Department, Location, Person


@admin.register(Location)
class LocationAdmin(admin.ModelAdmin):
    list_display = ("id", "area", "name", "code", "is_active", "created_at")
    list_filter = ("area", "is_active")
    search_fields = ("name", "code", "area")


@admin.register(Department)
class DepartmentAdmin(admin.ModelAdmin):
    list_display = ("id", "name", "is_active")
    search_fields = ("name",)


@admin.register(Person)
class PersonAdmin(admin.ModelAdmin):
    list_display = ("id", "name", "department", "is_active")
    list_filter = ("is_active", "department")
    search_fields = ("name",)


# EOF
