from django.contrib import admin, messages

from .exceptions import ArenaError
from .models import (
    Contest,
    ContestParticipant,
    Problem,
    Profile,
    Streak,
    Topic,
    UserProgress,
    WeekendTest,
)
from .services.topics import advance_topic, can_advance
from .services.verification import moderate_dispute
from .services.weekend import settle_penalty

admin.site.site_header = "LeetCode Arena Administration"
admin.site.site_title = "LeetCode Arena Admin"
admin.site.index_title = "Contest administration"


class SuperuserOnlyAdmin(admin.ModelAdmin):
    """
    Derived state (streaks) is maintained by the scheduling services; only
    superusers may see or edit it by hand.
    """

    def has_module_permission(self, request):
        return bool(request.user and request.user.is_superuser)

    def has_view_permission(self, request, obj=None):
        return bool(request.user and request.user.is_superuser)

    def has_add_permission(self, request):
        return bool(request.user and request.user.is_superuser)

    def has_change_permission(self, request, obj=None):
        return bool(request.user and request.user.is_superuser)

    def has_delete_permission(self, request, obj=None):
        return bool(request.user and request.user.is_superuser)


@admin.register(Profile)
class ProfileAdmin(admin.ModelAdmin):
    list_display = ('user', 'leetcode_username', 'created_at')
    search_fields = ('user__username', 'leetcode_username')


class TopicInline(admin.TabularInline):
    model = Topic
    extra = 0
    fields = ('order_index', 'name', 'is_active', 'has_started', 'topic_started_at', 'topic_completed_at')
    readonly_fields = ('is_active', 'has_started', 'topic_started_at', 'topic_completed_at')


@admin.register(Contest)
class ContestAdmin(admin.ModelAdmin):
    list_display = (
        'name',
        'creator',
        'difficulty',
        'start_date',
        'easy_per_day',
        'medium_per_day',
        'hard_days_per_problem',
        'is_active',
    )
    list_filter = ('difficulty', 'is_active')
    search_fields = ('name', 'creator__username')
    ordering = ('-start_date',)
    inlines = [TopicInline]
    actions = ['start_next_topic']

    def save_model(self, request, obj, form, change):
        if 'password' in form.changed_data:
            obj.set_password(form.cleaned_data['password'])
        super().save_model(request, obj, form, change)

    @admin.action(description="Start next topic")
    def start_next_topic(self, request, queryset):
        for contest in queryset:
            check = can_advance(contest.pk, requesting_user=request.user)
            if not check.allowed:
                self.message_user(request, f"{contest.name}: {check.reason}", level=messages.WARNING)
                continue
            try:
                topic = advance_topic(contest.pk, request.user)
            except ArenaError as exc:
                self.message_user(request, f"{contest.name}: {exc.message}", level=messages.ERROR)
                continue
            self.message_user(request, f"{contest.name}: started {topic.name}", level=messages.SUCCESS)


class ProblemInline(admin.TabularInline):
    model = Problem
    extra = 0


@admin.register(Topic)
class TopicAdmin(admin.ModelAdmin):
    list_display = ('name', 'contest', 'order_index', 'is_active', 'has_started', 'topic_started_at')
    list_filter = ('is_active', 'has_started', 'contest')
    search_fields = ('name', 'contest__name')
    ordering = ('contest', 'order_index')
    inlines = [ProblemInline]


@admin.register(Problem)
class ProblemAdmin(admin.ModelAdmin):
    list_display = ('title', 'difficulty', 'leetcode_id', 'topic', 'order_index')
    list_filter = ('difficulty', 'topic__contest')
    search_fields = ('title', 'title_slug', 'leetcode_id')


@admin.register(WeekendTest)
class WeekendTestAdmin(admin.ModelAdmin):
    list_display = ('contest', 'starts_on', 'title')
    list_filter = ('contest',)
    filter_horizontal = ('problems',)
    ordering = ('-starts_on',)


@admin.register(UserProgress)
class UserProgressAdmin(admin.ModelAdmin):
    list_display = ('user', 'problem', 'completed', 'is_missed', 'completed_at', 'verified_at')
    list_filter = ('completed', 'is_missed', 'topic__contest')
    search_fields = ('user__username', 'problem__title')
    actions = ['approve_dispute', 'reject_dispute']

    def _moderate(self, request, queryset, action):
        done = 0
        for progress in queryset.select_related('topic__contest'):
            try:
                moderate_dispute(request.user, progress.user_id, progress.problem_id, action)
                done += 1
            except ArenaError as exc:
                self.message_user(request, f"{progress}: {exc.message}", level=messages.ERROR)
        if done:
            self.message_user(request, f"{done} row(s) {action}d.", level=messages.SUCCESS)

    @admin.action(description="Approve disputed solve")
    def approve_dispute(self, request, queryset):
        self._moderate(request, queryset, "approve")

    @admin.action(description="Reject disputed solve")
    def reject_dispute(self, request, queryset):
        self._moderate(request, queryset, "reject")


@admin.register(ContestParticipant)
class ContestParticipantAdmin(admin.ModelAdmin):
    list_display = (
        'user',
        'contest',
        'role',
        'points',
        'current_streak',
        'needs_payment',
        'has_paid',
        'last_weekend_success',
        'is_visible',
    )
    list_filter = ('role', 'needs_payment', 'has_paid', 'is_visible', 'contest')
    search_fields = ('user__username', 'contest__name')
    actions = ['mark_penalty_paid']

    @admin.action(description="Mark weekend penalty as paid")
    def mark_penalty_paid(self, request, queryset):
        updated = 0
        for participant in queryset.filter(needs_payment=True).select_related('contest', 'user'):
            settle_penalty(participant.contest, participant.user)
            updated += 1
        self.message_user(request, f"{updated} penalty(ies) settled.", level=messages.SUCCESS)


@admin.register(Streak)
class StreakAdmin(SuperuserOnlyAdmin):
    list_display = ('user', 'current_streak', 'longest_streak', 'last_active_at', 'freezes_left')
    search_fields = ('user__username',)
    ordering = ('-current_streak',)
