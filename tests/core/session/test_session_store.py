from app.core.session import ChatMessage, ExpertiseLevel, SessionStore, detect_intent


def _user(text: str) -> ChatMessage:
    return ChatMessage(role="user", content=text)


def test_history_keeps_most_recent_messages():
    store = SessionStore(max_history=10)

    for i in range(13):
        store.append_message("s1", ChatMessage(role="assistant", content=f"m{i}"))

    messages = store.get_messages("s1")
    assert len(messages) == 10
    assert messages[0].content == "m3"
    assert messages[-1].content == "m12"


def test_new_session_has_default_profile():
    store = SessionStore()

    profile = store.get_profile("fresh")

    assert profile.expertise_level == ExpertiseLevel.BEGINNER
    assert profile.preferred_tokens == ["SOL", "USDC"]
    assert profile.interests == []


def test_advanced_terms_win_over_intermediate():
    store = SessionStore()

    store.append_message("s", _user("what is the tvl of this liquidity pool on my wallet"))

    assert store.get_profile("s").expertise_level == ExpertiseLevel.ADVANCED


def test_advanced_is_not_downgraded():
    store = SessionStore()
    store.append_message("s", _user("explain mev to me"))

    store.append_message("s", _user("show my wallet"))

    assert store.get_profile("s").expertise_level == ExpertiseLevel.ADVANCED


def test_intermediate_from_general_terms():
    store = SessionStore()

    store.append_message("s", _user("how does a blockchain work"))

    assert store.get_profile("s").expertise_level == ExpertiseLevel.INTERMEDIATE


def test_mentioned_tokens_move_to_front_and_stay_bounded():
    store = SessionStore(max_preferred_tokens=5)

    store.append_message("s", _user("tell me about bonk"))
    store.append_message("s", _user("and jupiter"))
    store.append_message("s", _user("what about raydium and dogwifhat"))
    store.append_message("s", _user("usdc please"))

    tokens = store.get_profile("s").preferred_tokens
    assert tokens[0] == "USDC"
    assert len(tokens) == 5
    assert tokens.count("USDC") == 1
    assert "SOL" not in tokens


def test_interests_are_recorded_once():
    store = SessionStore()

    store.append_message("s", _user("I like nft art"))
    store.append_message("s", _user("more nft collections"))

    assert store.get_profile("s").interests == ["nft"]


def test_assistant_messages_do_not_touch_profile():
    store = SessionStore()

    store.append_message("s", ChatMessage(role="assistant", content="staking on jupiter is advanced"))

    profile = store.get_profile("s")
    assert profile.expertise_level == ExpertiseLevel.BEGINNER
    assert profile.preferred_tokens == ["SOL", "USDC"]


def test_last_intent_tracks_keywords():
    store = SessionStore()

    store.append_message("s", _user("swap my tokens"))
    assert store.get_profile("s").last_intent == "swap"

    store.append_message("s", _user("hello there"))
    assert store.get_profile("s").last_intent == "swap"


def test_detect_intent_order():
    assert detect_intent("convert everything") == "swap"
    assert detect_intent("show my portfolio") == "balance"
    assert detect_intent("recent activity") == "history"
    assert detect_intent("what is it worth") == "price"
    assert detect_intent("market chart") == "market"
    assert detect_intent("good morning") is None


def test_bind_wallet_returns_previous():
    store = SessionStore()

    assert store.bind_wallet("s", "AAA") is None
    assert store.bind_wallet("s", "BBB") == "AAA"
