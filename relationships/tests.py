from django.db import IntegrityError, connection, transaction
from django.test import TestCase, override_settings
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase
from relationships import errors, services
from relationships.models import (
    Company,
    CompanyConnectionRequest,
    CompanyFollow,
    ConnectionStatus,
    Membership,
    MembershipRole,
    MembershipStatus,
    Person,
    PersonConnectionRequest,
)
from relationships.permissions import can_act_for
from relationships.services import ConnectionState, Decision
from unittest.mock import patch
import uuid


def make_person(username, **extra):
    return Person.objects.create_user(
        username=username,
        password="pass1234",
        display_name=username.title(),
        **extra,
    )


def make_company(name, **members):
    """make_company("Acme", owner=p1, admin=p2) adds memberships by role name."""
    company = Company.objects.create(name=name)
    for role, person in members.items():
        Membership.objects.create(person=person, company=company, role=role.upper())
    return company


# Authorization gate
class CanActForTests(TestCase):
    def setUp(self):
        self.owner = make_person("owner")
        self.admin = make_person("admin")
        self.member = make_person("member")
        self.viewer = make_person("viewer")
        self.stranger = make_person("stranger")
        self.company = make_company(
            "Acme", owner=self.owner, admin=self.admin, member=self.member, viewer=self.viewer
        )

    def test_owner_and_admin_may_act(self):
        self.assertTrue(can_act_for(self.owner, self.company))
        self.assertTrue(can_act_for(self.admin, self.company))

    def test_member_and_viewer_may_not_act(self):
        self.assertFalse(can_act_for(self.member, self.company))
        self.assertFalse(can_act_for(self.viewer, self.company))

    def test_unknown_pairs_are_false_not_errors(self):
        self.assertFalse(can_act_for(self.stranger, self.company))
        self.assertFalse(can_act_for(self.owner, uuid.uuid4()))
        self.assertFalse(can_act_for(None, self.company))
        self.assertFalse(can_act_for(self.owner, None))

    def test_accepts_company_id(self):
        self.assertTrue(can_act_for(self.owner, self.company.id))
        self.assertTrue(can_act_for(self.owner, str(self.company.id)))

    def test_malformed_company_id_is_false(self):
        self.assertFalse(can_act_for(self.owner, "not-a-uuid"))
        self.assertFalse(can_act_for(self.owner, 12345))

    def test_suspended_admin_may_not_act(self):
        Membership.objects.filter(person=self.admin).update(status=MembershipStatus.SUSPENDED)
        self.assertFalse(can_act_for(self.admin, self.company))


# Person to person connections
class PersonConnectionStateTests(TestCase):
    def setUp(self):
        self.u1 = make_person("u1")
        self.u2 = make_person("u2")
        self.u3 = make_person("u3")

    def test_send_sets_directional_pending_states(self):
        services.send_request(self.u1, self.u1, self.u2)

        self.assertEqual(services.status_of(self.u1, self.u2), ConnectionState.PENDING_SENT)
        self.assertEqual(services.status_of(self.u2, self.u1), ConnectionState.PENDING_RECEIVED)

    def test_send_records_request_fields(self):
        request = services.send_request(self.u1, self.u1, self.u2, notes="hello")

        self.assertEqual(request.status, ConnectionStatus.PENDING)
        self.assertEqual(request.acting_person, self.u1)
        self.assertEqual(request.notes, "hello")
        self.assertIsNotNone(request.requested_at)
        self.assertIsNone(request.responded_at)

    def test_accept_makes_both_sides_accepted(self):
        request = services.send_request(self.u1, self.u1, self.u2)
        services.respond_to_request(self.u2, request, Decision.ACCEPT)

        self.assertEqual(services.status_of(self.u1, self.u2), ConnectionState.ACCEPTED)
        self.assertEqual(services.status_of(self.u2, self.u1), ConnectionState.ACCEPTED)
        request.refresh_from_db()
        self.assertIsNotNone(request.responded_at)
        self.assertEqual(request.responded_by, self.u2)

    def test_second_response_is_already_resolved(self):
        request = services.send_request(self.u1, self.u1, self.u2)
        services.respond_to_request(self.u2, request, "decline")

        with self.assertRaises(errors.AlreadyResolved):
            services.respond_to_request(self.u2, request, "accept")

        request.refresh_from_db()
        self.assertEqual(request.status, ConnectionStatus.DECLINED)
        self.assertEqual(services.status_of(self.u1, self.u2), ConnectionState.DECLINED_SENT)
        self.assertEqual(services.status_of(self.u2, self.u1), ConnectionState.DECLINED_RECEIVED)

    def test_stale_copy_cannot_apply_a_second_decision(self):
        request = services.send_request(self.u1, self.u1, self.u2)
        stale = PersonConnectionRequest.objects.get(pk=request.pk)
        services.respond_to_request(self.u2, request, "accept")

        with self.assertRaises(errors.AlreadyResolved):
            services.respond_to_request(self.u2, stale, "decline")

        request.refresh_from_db()
        self.assertEqual(request.status, ConnectionStatus.ACCEPTED)

    def test_send_twice_is_already_requested(self):
        services.send_request(self.u1, self.u1, self.u2)

        with self.assertRaises(errors.AlreadyRequested):
            services.send_request(self.u1, self.u1, self.u2)

        self.assertEqual(PersonConnectionRequest.objects.pending().count(), 1)

    def test_reverse_send_while_pending_is_already_requested(self):
        services.send_request(self.u1, self.u1, self.u2)

        with self.assertRaises(errors.AlreadyRequested):
            services.send_request(self.u2, self.u2, self.u1)

        self.assertEqual(PersonConnectionRequest.objects.count(), 1)

    def test_send_to_existing_connection_is_already_requested(self):
        request = services.send_request(self.u1, self.u1, self.u2)
        services.respond_to_request(self.u2, request, "accept")

        with self.assertRaises(errors.AlreadyRequested):
            services.send_request(self.u2, self.u2, self.u1)

    def test_cannot_connect_with_yourself(self):
        with self.assertRaises(errors.SelfReference):
            services.send_request(self.u1, self.u1, self.u1)
        self.assertFalse(PersonConnectionRequest.objects.exists())

    def test_cannot_send_as_someone_else(self):
        with self.assertRaises(errors.Unauthorized):
            services.send_request(self.u3, self.u1, self.u2)
        self.assertFalse(PersonConnectionRequest.objects.exists())

    def test_requester_cannot_respond_to_own_request(self):
        request = services.send_request(self.u1, self.u1, self.u2)

        with self.assertRaises(errors.Unauthorized):
            services.respond_to_request(self.u1, request, "accept")

        request.refresh_from_db()
        self.assertEqual(request.status, ConnectionStatus.PENDING)

    def test_third_party_cannot_respond(self):
        request = services.send_request(self.u1, self.u1, self.u2)

        with self.assertRaises(errors.Unauthorized):
            services.respond_to_request(self.u3, request, "accept")

    def test_third_party_learns_nothing_about_resolved_request(self):
        request = services.send_request(self.u1, self.u1, self.u2)
        services.respond_to_request(self.u2, request, "decline")

        with self.assertRaises(errors.Unauthorized):
            services.respond_to_request(self.u3, request, "accept")
        with self.assertRaises(errors.Unauthorized):
            services.cancel_request(self.u3, request)

    def test_unknown_decision_is_rejected(self):
        request = services.send_request(self.u1, self.u1, self.u2)

        with self.assertRaises(ValueError):
            services.respond_to_request(self.u2, request, "maybe")

    def test_cancel_pending_request_deletes_it(self):
        request = services.send_request(self.u1, self.u1, self.u2)
        services.cancel_request(self.u1, request)

        self.assertFalse(PersonConnectionRequest.objects.filter(pk=request.pk).exists())
        self.assertEqual(services.status_of(self.u1, self.u2), ConnectionState.NONE)
        self.assertEqual(services.status_of(self.u2, self.u1), ConnectionState.NONE)

    def test_addressee_cannot_cancel(self):
        request = services.send_request(self.u1, self.u1, self.u2)

        with self.assertRaises(errors.Unauthorized):
            services.cancel_request(self.u2, request)
        self.assertTrue(PersonConnectionRequest.objects.filter(pk=request.pk).exists())

    def test_cancel_accepted_connection_is_not_cancelable(self):
        request = services.send_request(self.u1, self.u1, self.u2)
        services.respond_to_request(self.u2, request, "accept")

        with self.assertRaises(errors.NotCancelable):
            services.cancel_request(self.u1, request)

        self.assertEqual(services.status_of(self.u1, self.u2), ConnectionState.ACCEPTED)

    def test_cancel_with_stale_pending_copy_does_not_remove_connection(self):
        request = services.send_request(self.u1, self.u1, self.u2)
        stale = PersonConnectionRequest.objects.get(pk=request.pk)
        services.respond_to_request(self.u2, request, "accept")

        with self.assertRaises(errors.NotCancelable):
            services.cancel_request(self.u1, stale)

        self.assertEqual(services.status_of(self.u1, self.u2), ConnectionState.ACCEPTED)

    def test_remove_accepted_connection(self):
        request = services.send_request(self.u1, self.u1, self.u2)
        services.respond_to_request(self.u2, request, "accept")

        # either side may remove on their own
        services.remove_connection(self.u2, self.u2, self.u1)

        self.assertEqual(services.status_of(self.u1, self.u2), ConnectionState.NONE)
        self.assertEqual(services.status_of(self.u2, self.u1), ConnectionState.NONE)
        self.assertFalse(PersonConnectionRequest.objects.exists())

    def test_remove_without_connection_is_not_found(self):
        request = services.send_request(self.u1, self.u1, self.u2)

        with self.assertRaises(errors.NotFound):
            services.remove_connection(self.u1, self.u1, self.u2)

        request.refresh_from_db()
        self.assertEqual(request.status, ConnectionStatus.PENDING)

    def test_outsider_cannot_remove(self):
        request = services.send_request(self.u1, self.u1, self.u2)
        services.respond_to_request(self.u2, request, "accept")

        with self.assertRaises(errors.Unauthorized):
            services.remove_connection(self.u3, self.u1, self.u2)
        self.assertEqual(services.status_of(self.u1, self.u2), ConnectionState.ACCEPTED)

    def test_request_again_after_decline(self):
        request = services.send_request(self.u1, self.u1, self.u2)
        services.respond_to_request(self.u2, request, "decline")

        again = services.send_request(self.u2, self.u2, self.u1)

        self.assertEqual(again.status, ConnectionStatus.PENDING)
        self.assertEqual(services.status_of(self.u2, self.u1), ConnectionState.PENDING_SENT)
        self.assertEqual(PersonConnectionRequest.objects.filter(status=ConnectionStatus.DECLINED).count(), 1)

    @override_settings(RELATIONSHIPS={"ALLOW_REQUEST_AFTER_DECLINE": False})
    def test_decline_is_final_when_configured(self):
        request = services.send_request(self.u1, self.u1, self.u2)
        services.respond_to_request(self.u2, request, "decline")

        with self.assertRaises(errors.AlreadyRequested):
            services.send_request(self.u1, self.u1, self.u2)
        self.assertEqual(PersonConnectionRequest.objects.count(), 1)

    def test_mixed_kinds_are_rejected(self):
        company = make_company("Acme", owner=self.u1)

        with self.assertRaises(ValueError):
            services.send_request(self.u1, self.u1, company)


class BlockedPairTests(TestCase):
    def setUp(self):
        self.u1 = make_person("u1")
        self.u2 = make_person("u2")
        self.block = PersonConnectionRequest.objects.create(
            requester=self.u1,
            addressee=self.u2,
            acting_person=self.u1,
            status=ConnectionStatus.BLOCKED,
        )

    def test_status_is_blocked_both_ways(self):
        self.assertEqual(services.status_of(self.u1, self.u2), ConnectionState.BLOCKED)
        self.assertEqual(services.status_of(self.u2, self.u1), ConnectionState.BLOCKED)

    def test_send_is_blocked(self):
        with self.assertRaises(errors.Blocked):
            services.send_request(self.u2, self.u2, self.u1)
        self.assertEqual(PersonConnectionRequest.objects.count(), 1)

    def test_respond_and_cancel_are_blocked(self):
        with self.assertRaises(errors.Blocked):
            services.respond_to_request(self.u2, self.block, "accept")
        with self.assertRaises(errors.Blocked):
            services.cancel_request(self.u1, self.block)

        self.block.refresh_from_db()
        self.assertEqual(self.block.status, ConnectionStatus.BLOCKED)

    def test_remove_is_blocked(self):
        with self.assertRaises(errors.Blocked):
            services.remove_connection(self.u1, self.u1, self.u2)
        self.assertTrue(PersonConnectionRequest.objects.filter(pk=self.block.pk).exists())

    def test_outsider_is_unauthorized_not_blocked(self):
        outsider = make_person("outsider")

        with self.assertRaises(errors.Unauthorized):
            services.respond_to_request(outsider, self.block, "accept")


class PairUniquenessTests(TestCase):
    """The live-pair rule is held by the database, not only by the service checks."""

    def setUp(self):
        self.u1 = make_person("u1")
        self.u2 = make_person("u2")

    def test_database_rejects_second_live_row_for_pair(self):
        PersonConnectionRequest.objects.create(requester=self.u1, addressee=self.u2, acting_person=self.u1)

        with self.assertRaises(IntegrityError):
            with transaction.atomic():
                PersonConnectionRequest.objects.create(
                    requester=self.u2, addressee=self.u1, acting_person=self.u2
                )

    def test_declined_rows_do_not_count(self):
        PersonConnectionRequest.objects.create(
            requester=self.u1, addressee=self.u2, acting_person=self.u1, status=ConnectionStatus.DECLINED
        )
        PersonConnectionRequest.objects.create(requester=self.u1, addressee=self.u2, acting_person=self.u1)

        self.assertEqual(PersonConnectionRequest.objects.for_pair(self.u2, self.u1).count(), 2)

    def test_database_rejects_self_request(self):
        with self.assertRaises(IntegrityError):
            with transaction.atomic():
                PersonConnectionRequest.objects.create(
                    requester=self.u1, addressee=self.u1, acting_person=self.u1
                )

    def test_racing_send_loses_with_already_requested(self):
        # the other caller's request lands after our check but before our insert
        PersonConnectionRequest.objects.create(requester=self.u2, addressee=self.u1, acting_person=self.u2)

        with patch("relationships.services.connections._active_request_exists", return_value=False):
            with self.assertRaises(errors.AlreadyRequested):
                services.send_request(self.u1, self.u1, self.u2)

        self.assertEqual(PersonConnectionRequest.objects.count(), 1)

    def test_constraint_hit_after_winner_vanished_is_already_requested(self):
        # the winning row was cancelled again before we looked for it
        with patch.object(PersonConnectionRequest.objects, "create", side_effect=IntegrityError("pair")):
            with self.assertRaises(errors.AlreadyRequested):
                services.send_request(self.u1, self.u1, self.u2)

        self.assertFalse(PersonConnectionRequest.objects.exists())


class BlockPairsAdminTests(TestCase):
    def setUp(self):
        self.staff = Person.objects.create_superuser(username="staff", password="pass1234")
        self.u1 = make_person("u1")
        self.u2 = make_person("u2")
        self.client.login(username="staff", password="pass1234")
        self.url = reverse("admin:relationships_personconnectionrequest_changelist")

    def _block(self, *rows):
        return self.client.post(
            self.url, {"action": "block_pairs", "_selected_action": [str(row.pk) for row in rows]}
        )

    def test_block_pending_request(self):
        request = services.send_request(self.u1, self.u1, self.u2)

        self.assertEqual(self._block(request).status_code, 302)

        self.assertEqual(services.status_of(self.u2, self.u1), ConnectionState.BLOCKED)

    def test_block_pair_with_only_declined_history(self):
        request = services.send_request(self.u1, self.u1, self.u2)
        services.respond_to_request(self.u2, request, "decline")

        self._block(request)

        self.assertEqual(services.status_of(self.u1, self.u2), ConnectionState.BLOCKED)
        with self.assertRaises(errors.Blocked):
            services.send_request(self.u2, self.u2, self.u1)

    def test_declined_row_next_to_live_row_blocks_the_live_row(self):
        declined = services.send_request(self.u1, self.u1, self.u2)
        services.respond_to_request(self.u2, declined, "decline")
        pending = services.send_request(self.u2, self.u2, self.u1)

        self._block(declined)

        pending.refresh_from_db()
        declined.refresh_from_db()
        self.assertEqual(pending.status, ConnectionStatus.BLOCKED)
        self.assertEqual(declined.status, ConnectionStatus.DECLINED)


# Company to company connections
class CompanyConnectionTests(TestCase):
    def setUp(self):
        self.org1_admin = make_person("org1admin")
        self.org1_member = make_person("org1member")
        self.org2_owner = make_person("org2owner")
        self.org2_member = make_person("org2member")
        self.org1 = make_company("Org One", admin=self.org1_admin, member=self.org1_member)
        self.org2 = make_company("Org Two", owner=self.org2_owner, member=self.org2_member)

    def test_admin_sends_on_behalf_of_company(self):
        request = services.send_request(self.org1_admin, self.org1, self.org2)

        self.assertIsInstance(request, CompanyConnectionRequest)
        self.assertEqual(request.acting_person, self.org1_admin)
        self.assertEqual(services.status_of(self.org1, self.org2), ConnectionState.PENDING_SENT)
        self.assertEqual(services.status_of(self.org2, self.org1), ConnectionState.PENDING_RECEIVED)

    def test_member_cannot_send(self):
        with self.assertRaises(errors.Unauthorized):
            services.send_request(self.org1_member, self.org1, self.org2)
        self.assertFalse(CompanyConnectionRequest.objects.exists())

    def test_admin_of_addressee_cannot_send_for_requester(self):
        with self.assertRaises(errors.Unauthorized):
            services.send_request(self.org2_owner, self.org1, self.org2)

    def test_addressee_owner_accepts(self):
        request = services.send_request(self.org1_admin, self.org1, self.org2)
        services.respond_to_request(self.org2_owner, request, "ACCEPTED")

        self.assertEqual(services.status_of(self.org1, self.org2), ConnectionState.ACCEPTED)
        self.assertEqual(services.status_of(self.org2, self.org1), ConnectionState.ACCEPTED)

    def test_member_of_addressee_cannot_respond(self):
        request = services.send_request(self.org1_admin, self.org1, self.org2)

        with self.assertRaises(errors.Unauthorized):
            services.respond_to_request(self.org2_member, request, "accept")

    def test_requesting_side_cannot_respond(self):
        request = services.send_request(self.org1_admin, self.org1, self.org2)

        with self.assertRaises(errors.Unauthorized):
            services.respond_to_request(self.org1_admin, request, "accept")

    def test_person_admin_of_both_cannot_accept_own_request(self):
        Membership.objects.create(person=self.org1_admin, company=self.org2, role=MembershipRole.ADMIN)
        request = services.send_request(self.org1_admin, self.org1, self.org2)

        with self.assertRaises(errors.Unauthorized):
            services.respond_to_request(self.org1_admin, request, "accept")

    def test_pending_outgoing_lists_request_until_cancelled(self):
        request = services.send_request(self.org1_admin, self.org1, self.org2)

        self.assertEqual(list(services.pending_outgoing(self.org1)), [request])
        self.assertEqual(list(services.pending_outgoing(self.org1)), [request])

        with self.assertRaises(errors.Unauthorized):
            services.cancel_request(self.org1_member, request)
        self.assertEqual(list(services.pending_outgoing(self.org1)), [request])

        services.cancel_request(self.org1_admin, request)
        self.assertEqual(list(services.pending_outgoing(self.org1)), [])

    def test_remove_by_admin_of_either_side(self):
        request = services.send_request(self.org1_admin, self.org1, self.org2)
        services.respond_to_request(self.org2_owner, request, "accept")

        services.remove_connection(self.org2_owner, self.org2, self.org1)

        self.assertEqual(services.status_of(self.org1, self.org2), ConnectionState.NONE)

    def test_member_cannot_remove(self):
        request = services.send_request(self.org1_admin, self.org1, self.org2)
        services.respond_to_request(self.org2_owner, request, "accept")

        with self.assertRaises(errors.Unauthorized):
            services.remove_connection(self.org1_member, self.org1, self.org2)
        self.assertEqual(services.status_of(self.org1, self.org2), ConnectionState.ACCEPTED)

    def test_person_and_company_pairs_are_independent(self):
        services.send_request(self.org1_admin, self.org1_admin, self.org2_owner)
        services.send_request(self.org1_admin, self.org1, self.org2)

        self.assertEqual(PersonConnectionRequest.objects.count(), 1)
        self.assertEqual(CompanyConnectionRequest.objects.count(), 1)


# Query facade
class ConnectionQueryTests(TestCase):
    def setUp(self):
        self.u1 = make_person("u1")
        self.u2 = make_person("u2")
        self.u3 = make_person("u3")
        self.u4 = make_person("u4", is_network_public=False)

    def test_pending_incoming_has_single_entry_from_sender(self):
        services.send_request(self.u1, self.u1, self.u2)

        incoming = list(services.pending_incoming(self.u2))
        self.assertEqual(len(incoming), 1)
        self.assertEqual(incoming[0].requester, self.u1)
        self.assertEqual(list(services.pending_incoming(self.u1)), [])
        self.assertEqual(len(services.pending_outgoing(self.u1)), 1)

    def test_resolved_requests_leave_pending_lists(self):
        request = services.send_request(self.u1, self.u1, self.u2)
        services.respond_to_request(self.u2, request, "decline")

        self.assertEqual(list(services.pending_incoming(self.u2)), [])
        self.assertEqual(list(services.pending_outgoing(self.u1)), [])

    def test_current_connections_from_both_directions(self):
        sent = services.send_request(self.u1, self.u1, self.u2)
        services.respond_to_request(self.u2, sent, "accept")
        received = services.send_request(self.u3, self.u3, self.u1)
        services.respond_to_request(self.u1, received, "accept")
        services.send_request(self.u4, self.u4, self.u1)

        connections = services.current_connections(self.u1)

        self.assertCountEqual(connections, [self.u2, self.u3])
        self.assertEqual(services.current_connections(self.u2), [self.u1])

    def test_status_between_delegates_to_status_of(self):
        services.send_request(self.u1, self.u1, self.u2)
        self.assertEqual(services.status_between(self.u2, self.u1), ConnectionState.PENDING_RECEIVED)
        self.assertEqual(services.status_between(self.u1, self.u3), ConnectionState.NONE)

    def test_private_network_only_visible_to_self(self):
        self.assertTrue(services.can_view_network(self.u1, self.u2))
        self.assertFalse(services.can_view_network(self.u1, self.u4))
        self.assertTrue(services.can_view_network(self.u4, self.u4))

    def test_network_carries_connected_at(self):
        request = services.send_request(self.u1, self.u1, self.u2)
        request = services.respond_to_request(self.u2, request, "accept")

        self.assertEqual(services.network_of(self.u1), [(self.u2, request.responded_at)])
        self.assertEqual(services.network_of(self.u2), [(self.u1, request.responded_at)])


# Follows
class CompanyFollowTests(TestCase):
    def setUp(self):
        self.owner = make_person("owner")
        self.member = make_person("member")
        self.fan = make_person("fan")
        self.company = make_company("Acme", owner=self.owner, member=self.member)

    def test_follow_is_idempotent(self):
        edge, created = services.follow(self.fan, self.company)
        again, created_again = services.follow(self.fan, self.company)

        self.assertTrue(created)
        self.assertFalse(created_again)
        self.assertEqual(edge.pk, again.pk)
        self.assertEqual(CompanyFollow.objects.filter(person=self.fan, company=self.company).count(), 1)

    def test_unfollow_is_idempotent(self):
        services.follow(self.fan, self.company)

        self.assertTrue(services.unfollow(self.fan, self.company))
        self.assertFalse(services.unfollow(self.fan, self.company))
        self.assertFalse(services.is_following(self.fan, self.company))

    def test_is_following(self):
        self.assertFalse(services.is_following(self.fan, self.company))
        services.follow(self.fan, self.company)
        self.assertTrue(services.is_following(self.fan, self.company))

    def test_owner_cannot_follow_own_company(self):
        with self.assertRaises(errors.SelfFollow):
            services.follow(self.owner, self.company)
        self.assertFalse(CompanyFollow.objects.exists())

    @override_settings(RELATIONSHIPS={"FORBID_SELF_FOLLOW": False})
    def test_owner_may_follow_when_allowed(self):
        _, created = services.follow(self.owner, self.company)
        self.assertTrue(created)

    def test_plain_member_may_follow(self):
        _, created = services.follow(self.member, self.company)
        self.assertTrue(created)

    def test_followed_companies_and_followers(self):
        other = make_company("Other")
        services.follow(self.fan, self.company)
        services.follow(self.fan, other)
        services.follow(self.member, self.company)

        followed = [edge.company for edge in services.followed_companies(self.fan)]
        self.assertCountEqual(followed, [self.company, other])
        self.assertEqual(services.follower_count(self.company), 2)
        self.assertCountEqual(
            [edge.person for edge in services.company_followers(self.company)],
            [self.fan, self.member],
        )


# HTTP API
class PersonConnectionAPITests(APITestCase):
    def setUp(self):
        self.u1 = make_person("u1")
        self.u2 = make_person("u2")
        self.client.login(username="u1", password="pass1234")

    def test_requires_login(self):
        self.client.logout()
        resp = self.client.get("/api/connections/pending/")
        self.assertIn(resp.status_code, (status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN))

    def test_send_and_check_status(self):
        resp = self.client.post(
            "/api/connections/",
            {"addressee_person_id": str(self.u2.id), "note": "hi"},
            format="json",
        )
        self.assertEqual(resp.status_code, status.HTTP_201_CREATED)
        self.assertEqual(resp.data["status"], "PENDING")
        self.assertEqual(resp.data["addressee"]["id"], str(self.u2.id))
        self.assertEqual(resp.data["notes"], "hi")

        resp = self.client.get(f"/api/connections/status/{self.u2.id}/")
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.data, {"status": "PENDING_SENT"})

    def test_duplicate_send_is_conflict(self):
        url = "/api/connections/"
        data = {"addressee_person_id": str(self.u2.id)}
        self.client.post(url, data, format="json")
        resp = self.client.post(url, data, format="json")

        self.assertEqual(resp.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(resp.data["code"], "already_requested")
        self.assertEqual(PersonConnectionRequest.objects.count(), 1)

    def test_send_to_self_is_bad_request(self):
        resp = self.client.post(
            "/api/connections/", {"addressee_person_id": str(self.u1.id)}, format="json"
        )
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(resp.data["code"], "self_reference")

    def test_send_to_unknown_person_is_not_found(self):
        resp = self.client.post(
            "/api/connections/", {"addressee_person_id": str(uuid.uuid4())}, format="json"
        )
        self.assertEqual(resp.status_code, status.HTTP_404_NOT_FOUND)

    def test_addressee_sees_and_accepts_request(self):
        request = services.send_request(self.u1, self.u1, self.u2)
        self.client.login(username="u2", password="pass1234")

        resp = self.client.get("/api/connections/pending/")
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(len(resp.data), 1)
        self.assertEqual(resp.data[0]["counterpart"]["id"], str(self.u1.id))
        self.assertEqual(resp.data[0]["counterpart"]["display_name"], "U1")

        resp = self.client.post(
            f"/api/connections/{request.id}/respond/", {"decision": "accept"}, format="json"
        )
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.data["status"], "ACCEPTED")

        resp = self.client.post(
            f"/api/connections/{request.id}/respond/", {"decision": "decline"}, format="json"
        )
        self.assertEqual(resp.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(resp.data["code"], "already_resolved")

    def test_invalid_decision_is_bad_request(self):
        request = services.send_request(self.u1, self.u1, self.u2)
        self.client.login(username="u2", password="pass1234")

        resp = self.client.post(
            f"/api/connections/{request.id}/respond/", {"decision": "maybe"}, format="json"
        )
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("decision", resp.data)

    def test_respond_to_unknown_request_is_not_found(self):
        resp = self.client.post(
            f"/api/connections/{uuid.uuid4()}/respond/", {"decision": "accept"}, format="json"
        )
        self.assertEqual(resp.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(resp.data["code"], "not_found")

    def test_sent_list_and_cancel(self):
        request = services.send_request(self.u1, self.u1, self.u2)

        resp = self.client.get("/api/connections/sent/")
        self.assertEqual(len(resp.data), 1)
        self.assertEqual(resp.data[0]["counterpart"]["id"], str(self.u2.id))

        resp = self.client.delete(f"/api/connections/{request.id}/")
        self.assertEqual(resp.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(PersonConnectionRequest.objects.exists())

    def test_cancel_accepted_is_conflict(self):
        request = services.send_request(self.u1, self.u1, self.u2)
        services.respond_to_request(self.u2, request, "accept")

        resp = self.client.delete(f"/api/connections/{request.id}/")
        self.assertEqual(resp.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(resp.data["code"], "not_cancelable")

    def test_remove_connection(self):
        request = services.send_request(self.u1, self.u1, self.u2)
        services.respond_to_request(self.u2, request, "accept")

        resp = self.client.delete(f"/api/connections/with/{self.u2.id}/")
        self.assertEqual(resp.status_code, status.HTTP_204_NO_CONTENT)

        resp = self.client.delete(f"/api/connections/with/{self.u2.id}/")
        self.assertEqual(resp.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(resp.data["code"], "not_found")

    def test_person_network(self):
        request = services.send_request(self.u1, self.u1, self.u2)
        services.respond_to_request(self.u2, request, "accept")

        resp = self.client.get(f"/api/persons/{self.u2.id}/network/")
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.data["type"], "connections")
        self.assertEqual([p["id"] for p in resp.data["connections"]], [str(self.u1.id)])
        request.refresh_from_db()
        self.assertEqual(resp.data["connections"][0]["connected_at"], request.responded_at.isoformat())

    def test_private_network_is_forbidden_to_others(self):
        self.u2.is_network_public = False
        self.u2.save(update_fields=["is_network_public"])

        resp = self.client.get(f"/api/persons/{self.u2.id}/network/")
        self.assertEqual(resp.status_code, status.HTTP_403_FORBIDDEN)


class CompanyConnectionAPITests(APITestCase):
    def setUp(self):
        self.admin = make_person("orgadmin")
        self.member = make_person("orgmember")
        self.other_owner = make_person("otherowner")
        self.org1 = make_company("Org One", admin=self.admin, member=self.member)
        self.org2 = make_company("Org Two", owner=self.other_owner)

    def _send(self):
        return services.send_request(self.admin, self.org1, self.org2)

    def test_admin_sends_company_request(self):
        self.client.login(username="orgadmin", password="pass1234")

        resp = self.client.post(
            f"/api/companies/{self.org1.id}/connections/",
            {"target_company_id": str(self.org2.id)},
            format="json",
        )
        self.assertEqual(resp.status_code, status.HTTP_201_CREATED)
        self.assertEqual(resp.data["kind"], "ORGANIZATION")
        self.assertEqual(resp.data["requester"]["name"], "Org One")
        self.assertEqual(resp.data["acting_person_id"], str(self.admin.id))

    def test_member_cannot_send_company_request(self):
        self.client.login(username="orgmember", password="pass1234")

        resp = self.client.post(
            f"/api/companies/{self.org1.id}/connections/",
            {"target_company_id": str(self.org2.id)},
            format="json",
        )
        self.assertEqual(resp.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(resp.data["code"], "unauthorized")
        self.assertFalse(CompanyConnectionRequest.objects.exists())

    def test_pending_and_sent_lists_are_admin_only(self):
        self._send()

        self.client.login(username="orgmember", password="pass1234")
        resp = self.client.get(f"/api/companies/{self.org1.id}/connections/sent/")
        self.assertEqual(resp.status_code, status.HTTP_403_FORBIDDEN)

        self.client.login(username="orgadmin", password="pass1234")
        resp = self.client.get(f"/api/companies/{self.org1.id}/connections/sent/")
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(len(resp.data), 1)
        self.assertEqual(resp.data[0]["counterpart"]["name"], "Org Two")

        self.client.login(username="otherowner", password="pass1234")
        resp = self.client.get(f"/api/companies/{self.org2.id}/connections/pending/")
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(len(resp.data), 1)
        self.assertEqual(resp.data[0]["counterpart"]["id"], str(self.org1.id))

    def test_owner_accepts_and_status_is_accepted(self):
        request = self._send()
        self.client.login(username="otherowner", password="pass1234")

        resp = self.client.post(
            f"/api/company-connections/{request.id}/respond/", {"decision": "ACCEPTED"}, format="json"
        )
        self.assertEqual(resp.status_code, status.HTTP_200_OK)

        resp = self.client.get(f"/api/companies/{self.org2.id}/connections/{self.org1.id}/status/")
        self.assertEqual(resp.data, {"status": "ACCEPTED"})

        resp = self.client.get(f"/api/companies/{self.org1.id}/network/")
        self.assertEqual([c["id"] for c in resp.data["connections"]], [str(self.org2.id)])
        self.assertIsNotNone(resp.data["connections"][0]["connected_at"])

    def test_status_requires_admin_of_acting_company(self):
        self._send()
        self.client.login(username="orgmember", password="pass1234")

        resp = self.client.get(f"/api/companies/{self.org1.id}/connections/{self.org2.id}/status/")
        self.assertEqual(resp.status_code, status.HTTP_403_FORBIDDEN)

    def test_cancel_company_request(self):
        request = self._send()
        self.client.login(username="orgadmin", password="pass1234")

        resp = self.client.delete(f"/api/company-connections/{request.id}/")
        self.assertEqual(resp.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(CompanyConnectionRequest.objects.exists())

    def test_remove_requires_authority_over_acting_company(self):
        request = self._send()
        services.respond_to_request(self.other_owner, request, "accept")

        # other_owner administers org2, not org1
        self.client.login(username="otherowner", password="pass1234")
        resp = self.client.delete(f"/api/companies/{self.org1.id}/connections/{self.org2.id}/")
        self.assertEqual(resp.status_code, status.HTTP_403_FORBIDDEN)

        resp = self.client.delete(f"/api/companies/{self.org2.id}/connections/{self.org1.id}/")
        self.assertEqual(resp.status_code, status.HTTP_204_NO_CONTENT)
        self.assertEqual(services.status_of(self.org1, self.org2), ConnectionState.NONE)

    def test_admin_check(self):
        self.client.login(username="orgmember", password="pass1234")

        resp = self.client.get(f"/api/companies/{self.org1.id}/admins/{self.admin.id}/")
        self.assertEqual(resp.data, {"is_admin": True})
        resp = self.client.get(f"/api/companies/{self.org1.id}/admins/{self.member.id}/")
        self.assertEqual(resp.data, {"is_admin": False})
        resp = self.client.get(f"/api/companies/{self.org1.id}/admins/{uuid.uuid4()}/")
        self.assertEqual(resp.data, {"is_admin": False})


class CompanyFollowAPITests(APITestCase):
    def setUp(self):
        self.owner = make_person("owner")
        self.fan = make_person("fan")
        self.company = make_company("Acme", owner=self.owner)
        self.url = f"/api/companies/{self.company.id}/follow/"

    def test_follow_twice_then_unfollow_twice(self):
        self.client.login(username="fan", password="pass1234")

        resp = self.client.post(self.url)
        self.assertEqual(resp.status_code, status.HTTP_201_CREATED)
        self.assertEqual(resp.data["company"]["id"], str(self.company.id))
        resp = self.client.post(self.url)
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(CompanyFollow.objects.count(), 1)

        resp = self.client.get(self.url)
        self.assertEqual(resp.data, {"following": True, "follower_count": 1})

        self.assertEqual(self.client.delete(self.url).status_code, status.HTTP_204_NO_CONTENT)
        self.assertEqual(self.client.delete(self.url).status_code, status.HTTP_204_NO_CONTENT)
        resp = self.client.get(self.url)
        self.assertEqual(resp.data["following"], False)

    def test_owner_cannot_follow(self):
        self.client.login(username="owner", password="pass1234")

        resp = self.client.post(self.url)
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(resp.data["code"], "self_follow")

    def test_followed_companies_list(self):
        services.follow(self.fan, self.company)
        self.client.login(username="fan", password="pass1234")

        resp = self.client.get("/api/persons/me/followed-companies/")
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.data["type"], "followed_companies")
        self.assertEqual(resp.data["follows"][0]["company"]["name"], "Acme")

    def test_followers_list_is_admin_only(self):
        services.follow(self.fan, self.company)

        self.client.login(username="fan", password="pass1234")
        resp = self.client.get(f"/api/companies/{self.company.id}/followers/")
        self.assertEqual(resp.status_code, status.HTTP_403_FORBIDDEN)

        self.client.login(username="owner", password="pass1234")
        resp = self.client.get(f"/api/companies/{self.company.id}/followers/")
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual([p["id"] for p in resp.data["followers"]], [str(self.fan.id)])


class DatabaseIndexTests(TestCase):
    """Relationship tables should carry the indexes and constraints the engine relies on."""

    def _constraints(self, table_name):
        with connection.cursor() as cursor:
            return connection.introspection.get_constraints(cursor, table_name)

    def _indexed_columns(self, table_name):
        indexed = set()
        for name, info in self._constraints(table_name).items():
            if info.get("index") or info.get("unique"):
                indexed.add(tuple(info["columns"]))
        return indexed

    def test_connection_request_foreign_keys_indexed(self):
        for table in ("relationships_personconnectionrequest", "relationships_companyconnectionrequest"):
            indexed = self._indexed_columns(table)
            self.assertIn(("requester_id",), indexed)
            self.assertIn(("addressee_id",), indexed)
            self.assertIn(("pair_key",), indexed)

    def test_follow_pair_unique(self):
        constraints = self._constraints("relationships_companyfollow")
        unique = {tuple(info["columns"]) for info in constraints.values() if info.get("unique")}
        self.assertIn(("person_id", "company_id"), unique)
