from .connections import (
    ConnectionState,
    Decision,
    get_request,
    governing_request,
    may_act_as,
    request_model_for,
    send_request,
    respond_to_request,
    cancel_request,
    remove_connection,
    status_of,
)
from .follows import follow, unfollow, is_following
from .queries import (
    pending_incoming,
    pending_outgoing,
    current_connections,
    network_of,
    status_between,
    can_view_network,
    followed_companies,
    company_followers,
    follower_count,
)
