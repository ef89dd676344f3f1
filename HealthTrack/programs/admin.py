from django.contrib import admin
from .models import Program, Enrollment

@admin.register(Program)
class ProgramAdmin(admin.ModelAdmin):
    list_display = ['id', 'name', 'created_at']
    search_fields = ['name']
    ordering = ['name']

@admin.register(Enrollment)
class EnrollmentAdmin(admin.ModelAdmin):
    list_display = ['id', 'client', 'program', 'enrolled_at']
    search_fields = ['client__name', 'program__name']
    list_filter = ['program']
    raw_id_fields = ['client']
