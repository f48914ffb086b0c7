from django.contrib import admin
from django.contrib.auth.admin import UserAdmin
from .models import Person
from .models import Company
from .models import Membership
from .models import PersonConnectionRequest
from .models import CompanyConnectionRequest
from .models import CompanyFollow
from .models import ConnectionStatus
# localhost:8000/admin
# Staff are the only ones who can put a pair into BLOCKED, by editing the
# request's status here. Nothing in the API sets or lifts a block.


class PersonAdmin(UserAdmin):
    list_display = ('id', 'username', 'display_name', 'is_network_public', 'is_staff')
    fieldsets = UserAdmin.fieldsets + (
        ('Profile', {'fields': ('display_name', 'avatar_url', 'is_network_public')}),
    )


class MembershipInline(admin.TabularInline):
    model = Membership
    extra = 0


@admin.register(Company)
class CompanyAdmin(admin.ModelAdmin):
    list_display = ('name', 'industry', 'id', 'created_at')
    search_fields = ('name',)
    inlines = [MembershipInline]


@admin.register(Membership)
class MembershipAdmin(admin.ModelAdmin):
    list_display = ('person', 'company', 'role', 'status', 'joined_at')
    list_filter = ('role', 'status')
    search_fields = ('person__username', 'company__name')


class ConnectionRequestAdmin(admin.ModelAdmin):
    list_display = ['requester', 'addressee', 'status', 'acting_person', 'requested_at', 'responded_at']
    list_filter = ['status']
    readonly_fields = ['pair_key', 'requested_at', 'responded_at', 'acting_person', 'responded_by']
    actions = ['block_pairs']

    @admin.action(description="Block the selected pairs")
    def block_pairs(self, request, queryset):
        # A pair holds at most one live row: block that one if it exists,
        # otherwise turn the selected declined row into the block.
        blocked = set()
        for row in queryset.order_by("-requested_at"):
            if row.pair_key in blocked:
                continue
            pair = type(row).objects.filter(pair_key=row.pair_key)
            target = pair.live().first() or row
            pair.filter(pk=target.pk).update(status=ConnectionStatus.BLOCKED)
            blocked.add(row.pair_key)
        self.message_user(request, f"Blocked {len(blocked)} pair(s).")


@admin.register(PersonConnectionRequest)
class PersonConnectionRequestAdmin(ConnectionRequestAdmin):
    search_fields = ['requester__username', 'addressee__username']


@admin.register(CompanyConnectionRequest)
class CompanyConnectionRequestAdmin(ConnectionRequestAdmin):
    search_fields = ['requester__name', 'addressee__name']


@admin.register(CompanyFollow)
class CompanyFollowAdmin(admin.ModelAdmin):
    list_display = ('person', 'company', 'created_at')
    search_fields = ('person__username', 'company__name')
    list_filter = ('created_at',)


admin.site.register(Person, PersonAdmin)
