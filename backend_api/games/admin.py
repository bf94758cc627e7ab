from django.contrib import admin

from .models import GameProgress, GameSubmission, IntegrityReport, PuzzleAssignment, PuzzleDefinition


class PuzzleAssignmentInline(admin.TabularInline):
    model = PuzzleAssignment
    extra = 0
    fields = ("user_id", "variant_indexes", "created_at")
    readonly_fields = ("user_id", "variant_indexes", "created_at")
    can_delete = False


@admin.register(PuzzleDefinition)
class PuzzleDefinitionAdmin(admin.ModelAdmin):
    list_display = ("id", "title", "game_type", "date", "created_at")
    list_filter = ("game_type", "date")
    search_fields = ("title",)
    ordering = ("-date", "id")
    inlines = [PuzzleAssignmentInline]


@admin.register(PuzzleAssignment)
class PuzzleAssignmentAdmin(admin.ModelAdmin):
    list_display = ("user_id", "puzzle", "variant_indexes", "created_at")
    list_filter = ("puzzle__game_type",)
    search_fields = ("user_id", "puzzle__title")
    readonly_fields = ("content", "client_data", "created_at", "updated_at")


@admin.register(GameProgress)
class GameProgressAdmin(admin.ModelAdmin):
    list_display = ("user_id", "puzzle", "updated_at")
    search_fields = ("user_id",)
    readonly_fields = ("state", "created_at", "updated_at")


@admin.register(GameSubmission)
class GameSubmissionAdmin(admin.ModelAdmin):
    list_display = ("user_id", "puzzle", "score", "mistakes", "time_taken_secs", "completed_at")
    list_filter = ("puzzle__game_type",)
    search_fields = ("user_id", "puzzle__title")
    ordering = ("-completed_at",)
    readonly_fields = ("submission_data", "created_at", "updated_at")


@admin.register(IntegrityReport)
class IntegrityReportAdmin(admin.ModelAdmin):
    list_display = ("user_id", "signal", "puzzle", "created_at")
    list_filter = ("signal",)
    search_fields = ("user_id", "details")
    readonly_fields = ("created_at", "updated_at")
