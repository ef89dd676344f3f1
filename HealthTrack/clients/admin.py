from django.contrib import admin
from programs.models import Enrollment
from .models import Client


class EnrollmentInline(admin.TabularInline):
    model = Enrollment
    extra = 0
    readonly_fields = ['enrolled_at']


# Client Admin
@admin.register(Client)
class ClientAdmin(admin.ModelAdmin):
    list_display = ['id', 'name', 'age', 'gender', 'phone', 'created_at']
    search_fields = ['name', 'phone']
    list_filter = ['gender']
    inlines = [EnrollmentInline]
