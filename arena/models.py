from django.conf import settings
from django.contrib.auth.hashers import check_password, make_password
from django.contrib.auth.models import User
from django.db import models
from django.utils import timezone


def default_contest_time_zone():
    return settings.CONTEST_TIME_ZONE


class Profile(models.Model):
    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name='profile')
    leetcode_username = models.CharField(max_length=100, blank=True, null=True, unique=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.user.username} ({self.leetcode_username or '-'})"


class Contest(models.Model):
    DIFFICULTY_CHOICES = [
        ('beginner', 'Beginner'),
        ('intermediate', 'Intermediate'),
        ('advanced', 'Advanced'),
    ]

    name = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    creator = models.ForeignKey(User, on_delete=models.PROTECT, related_name='created_contests')
    difficulty = models.CharField(max_length=20, choices=DIFFICULTY_CHOICES, default='beginner')
    start_date = models.DateTimeField(default=timezone.now)

    # Release rates
    easy_per_day = models.PositiveIntegerField(default=2)
    medium_per_day = models.PositiveIntegerField(default=1)
    hard_days_per_problem = models.PositiveIntegerField(default=2)

    penalty_amount = models.PositiveIntegerField(default=100, help_text="Charged for a failed weekend test")
    time_zone = models.CharField(max_length=64, default=default_contest_time_zone)
    # Hashed with django.contrib.auth.hashers; blank means the contest is open.
    password = models.CharField(max_length=128, blank=True, default='')
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-start_date']

    def __str__(self):
        return self.name

    def set_password(self, raw_password):
        self.password = make_password(raw_password) if raw_password else ''

    def check_password(self, raw_password):
        if not self.password:
            return True
        return bool(raw_password) and check_password(raw_password, self.password)


class Topic(models.Model):
    contest = models.ForeignKey(Contest, on_delete=models.CASCADE, related_name='topics')
    name = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    order_index = models.PositiveIntegerField(default=0)

    is_active = models.BooleanField(default=False)
    has_started = models.BooleanField(default=False)
    topic_started_at = models.DateTimeField(null=True, blank=True)
    topic_completed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ['contest', 'order_index']
        constraints = [
            models.UniqueConstraint(
                fields=['contest', 'order_index'],
                name='topic_contest_order_uniq',
            ),
            models.UniqueConstraint(
                fields=['contest'],
                condition=models.Q(is_active=True),
                name='topic_single_active_per_contest',
            ),
        ]

    def __str__(self):
        return f"[{self.contest.name}] {self.order_index}. {self.name}"


class Problem(models.Model):
    EASY = 'Easy'
    MEDIUM = 'Medium'
    HARD = 'Hard'
    DIFFICULTY_CHOICES = [
        (EASY, 'Easy'),
        (MEDIUM, 'Medium'),
        (HARD, 'Hard'),
    ]

    topic = models.ForeignKey(Topic, on_delete=models.CASCADE, related_name='problems')
    difficulty = models.CharField(max_length=10, choices=DIFFICULTY_CHOICES)
    leetcode_id = models.CharField(max_length=20, help_text="Ex: 1, 242")
    title = models.CharField(max_length=200)
    title_slug = models.SlugField(max_length=200, blank=True)
    hyperlink = models.URLField(max_length=500, blank=True)
    tags = models.CharField(max_length=500, blank=True, default='')
    order_index = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ['topic', 'order_index']
        indexes = [
            models.Index(fields=['topic', 'difficulty', 'order_index'], name='arena_probl_topic_i_3c1f0e_idx'),
        ]

    def __str__(self):
        return f"{self.difficulty} - {self.title}"

    @property
    def url(self):
        if self.hyperlink:
            return self.hyperlink
        if self.title_slug:
            return f"https://leetcode.com/problems/{self.title_slug}/"
        return ''


class WeekendTest(models.Model):
    contest = models.ForeignKey(Contest, on_delete=models.CASCADE, related_name='weekend_tests')
    title = models.CharField(max_length=200, blank=True)
    starts_on = models.DateField(help_text="Saturday that opens the weekend window")
    problems = models.ManyToManyField(Problem, related_name='weekend_tests', blank=True)

    class Meta:
        ordering = ['-starts_on']
        constraints = [
            models.UniqueConstraint(
                fields=['contest', 'starts_on'],
                name='weekend_test_contest_window_uniq',
            ),
        ]

    def __str__(self):
        return f"{self.contest.name} - weekend of {self.starts_on}"


class UserProgress(models.Model):
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='progress')
    topic = models.ForeignKey(Topic, on_delete=models.CASCADE, related_name='progress')
    problem = models.ForeignKey(Problem, on_delete=models.CASCADE, related_name='progress')

    completed = models.BooleanField(default=False)
    completed_at = models.DateTimeField(null=True, blank=True)
    verified_at = models.DateTimeField(null=True, blank=True)
    is_missed = models.BooleanField(default=False)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=['user', 'problem'],
                name='user_progress_user_problem_uniq',
            ),
        ]
        indexes = [
            models.Index(fields=['user', 'topic', 'completed'], name='arena_userp_user_id_8a2d41_idx'),
            models.Index(fields=['completed_at'], name='arena_userp_complet_5e7b90_idx'),
        ]
        verbose_name = "User Progress"
        verbose_name_plural = "User Progress"

    def __str__(self):
        if self.completed:
            status = "completed"
        elif self.is_missed:
            status = "missed"
        else:
            status = "pending"
        return f"{self.user.username} - {self.problem.title}: {status}"


class ContestParticipant(models.Model):
    ROLE_CHOICES = [
        ('creator', 'Creator'),
        ('participant', 'Participant'),
    ]

    contest = models.ForeignKey(Contest, on_delete=models.CASCADE, related_name='participants')
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='participations')
    role = models.CharField(max_length=20, choices=ROLE_CHOICES, default='participant')

    current_streak = models.IntegerField(default=0)
    # Day the per-contest streak last moved; guards same-day repeats per contest.
    last_active_at = models.DateTimeField(null=True, blank=True)
    points = models.IntegerField(default=0)
    is_visible = models.BooleanField(default=False)

    # Weekend test / penalty state
    needs_payment = models.BooleanField(default=False)
    has_paid = models.BooleanField(default=False)
    last_weekend_attempt = models.DateTimeField(null=True, blank=True)
    last_weekend_success = models.BooleanField(default=False)
    last_payment_date = models.DateTimeField(null=True, blank=True)

    joined_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=['contest', 'user'],
                name='contest_participant_uniq',
            ),
        ]

    def __str__(self):
        return f"{self.user.username} @ {self.contest.name} ({self.role})"


class Streak(models.Model):
    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name='streak')
    current_streak = models.PositiveIntegerField(default=0)
    longest_streak = models.PositiveIntegerField(default=0)
    last_active_at = models.DateTimeField(null=True, blank=True)
    freezes_left = models.PositiveIntegerField(default=2)

    def __str__(self):
        return f"{self.user.username} - {self.current_streak} days (best {self.longest_streak})"
