"""
Tests for SharedGameState.

Tests:
- Player registry and id allocation
- Typed progress updates
- Round lifecycle on correct submissions
- Broadcast of every operation
- Atomicity under concurrent submissions
- Poisoned-lock handling
"""

import random
import threading

import pytest

from ..game.exceptions import StateAccessError
from ..game.shared import SharedGameState
from ..session.broadcast import BroadcastDispatcher


class TestRegistry:
    """Tests for join, rename and leave."""

    def test_ids_strictly_increase_across_leaves(self, game):
        """Ids are unique and never reused, even after players leave."""
        ids = []
        for i in range(5):
            player_id, _ = game.join(f"p{i}")
            ids.append(player_id)
            if i % 2 == 0:
                game.leave(player_id)
        ids.append(game.join("late")[0])

        assert ids == sorted(ids)
        assert len(set(ids)) == len(ids)

    def test_join_returns_full_snapshot(self, game):
        first, _ = game.join("ada")
        second, snapshot = game.join("bob")

        assert snapshot.player_ids == [first, second]
        assert snapshot.player(second).score == 0
        assert snapshot.player(second).typed == ""
        assert snapshot.round == 1
        assert snapshot.current_word == "bridge"

    def test_default_name_uses_id(self, game):
        player_id, snapshot = game.join()
        assert snapshot.player(player_id).name == f"player-{player_id}"

    def test_duplicate_names_allowed(self, game):
        """Identity is the id; two players may share a name."""
        a, _ = game.join("sam")
        b, _ = game.join("sam")

        game.submit_word(b, "bridge")
        snapshot = game.snapshot()

        assert a != b
        assert snapshot.player(a).score == 0
        assert snapshot.player(b).score == 1

    def test_rename(self, game):
        player_id, _ = game.join("ada")
        snapshot = game.rename(player_id, "Ada L.")
        assert snapshot.player(player_id).name == "Ada L."

    def test_rename_unknown_player_is_noop(self, game):
        game.join("ada")
        before = game.snapshot()
        assert game.rename(999, "ghost") == before

    def test_leave_removes_player(self, game):
        a, _ = game.join("ada")
        b, _ = game.join("bob")
        snapshot = game.leave(a)
        assert snapshot.player_ids == [b]
        assert game.player_count == 1

    def test_leave_unknown_player_is_noop(self, game):
        game.join("ada")
        assert game.leave(42).player_ids == [1]


class TestTypedProgress:
    """Tests for update_typed."""

    def test_sanitizes_against_current_word(self, game):
        player_id, _ = game.join("ada")
        snapshot = game.update_typed(player_id, "Br1Dge-Extra")
        assert snapshot.player(player_id).typed == "brdgee"

    def test_unknown_player_still_returns_snapshot(self, game):
        game.join("ada")
        snapshot = game.update_typed(77, "bri")
        assert snapshot.round == 1
        assert snapshot.player(77) is None

    def test_typed_never_affects_score(self, game):
        player_id, _ = game.join("ada")
        snapshot = game.update_typed(player_id, "bridge")
        assert snapshot.player(player_id).score == 0
        assert snapshot.round == 1


class TestRoundLifecycle:
    """Tests for submit_word."""

    def test_correct_submission_advances_round(self, game):
        winner, _ = game.join("ada")
        other, _ = game.join("bob")
        game.update_typed(winner, "brid")
        game.update_typed(other, "br")

        snapshot = game.submit_word(winner, "  BRIDGE ")

        assert snapshot.round == 2
        assert snapshot.winner_last_round == "ada"
        assert snapshot.current_word != "bridge"
        assert snapshot.player(winner).score == 1
        assert snapshot.player(other).score == 0
        assert all(p.typed == "" for p in snapshot.players)

    def test_case_insensitive_match(self, rng):
        game = SharedGameState(word_bank=("forest", "candle"), rng=rng, first_word="forest")
        player_id, _ = game.join("ada")

        rejected = game.submit_word(player_id, "forests")
        assert rejected.round == 1
        assert rejected.current_word == "forest"
        assert rejected.player(player_id).score == 0

        accepted = game.submit_word(player_id, "FOREST")
        assert accepted.round == 2
        assert accepted.current_word == "candle"

    def test_wrong_guess_changes_nothing(self, game):
        player_id, _ = game.join("ada")
        game.update_typed(player_id, "bri")
        before = game.snapshot()

        after = game.submit_word(player_id, "brigde")

        assert after == before

    def test_unknown_player_cannot_win(self, game):
        game.join("ada")
        snapshot = game.submit_word(99, "bridge")
        assert snapshot.round == 1
        assert snapshot.winner_last_round is None

    def test_new_word_always_differs(self, game):
        player_id, _ = game.join("ada")
        word = game.snapshot().current_word
        for expected_round in range(2, 30):
            snapshot = game.submit_word(player_id, word)
            assert snapshot.round == expected_round
            assert snapshot.current_word != word
            word = snapshot.current_word
        assert snapshot.player(player_id).score == 28

    def test_single_word_bank_repeats(self):
        game = SharedGameState(word_bank=("solo",))
        player_id, _ = game.join("ada")
        snapshot = game.submit_word(player_id, "solo")
        assert snapshot.round == 2
        assert snapshot.current_word == "solo"

    def test_winner_name_is_name_at_submission(self, game):
        player_id, _ = game.join("ada")
        game.rename(player_id, "countess")
        snapshot = game.submit_word(player_id, "bridge")
        assert snapshot.winner_last_round == "countess"

    def test_concurrent_submissions_win_once(self):
        """Many threads guessing the same word advance exactly one round."""
        game = SharedGameState(word_bank=("bridge", "forest"), first_word="bridge")
        ids = [game.join(f"p{i}")[0] for i in range(8)]
        barrier = threading.Barrier(len(ids))

        def guess(player_id):
            barrier.wait()
            game.submit_word(player_id, "bridge")

        threads = [threading.Thread(target=guess, args=(pid,)) for pid in ids]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        snapshot = game.snapshot()
        assert snapshot.round == 2
        assert snapshot.current_word == "forest"
        assert sum(p.score for p in snapshot.players) == 1


class TestBroadcasting:
    """Every operation reaches every connected player."""

    def test_join_welcomes_newcomer_only(self, game, outbox_factory):
        first = outbox_factory()
        second = outbox_factory()
        a, _ = game.join("ada", outbox=first)
        b, _ = game.join("bob", outbox=second)

        welcome, state = second.messages()
        assert welcome.type == "Welcome"
        assert welcome.data.player_id == b
        assert state.type == "State"
        assert [p.id for p in state.data.players] == [a, b]

        # The existing player sees the arrival but no extra Welcome.
        assert [m.type for m in first.messages()] == ["Welcome", "State", "State"]

    @pytest.mark.parametrize("operation, args", [
        ("rename", ("Ada L.",)),
        ("update_typed", ("br",)),
        ("submit_word", ("wrong",)),
        ("submit_word", ("bridge",)),
    ])
    def test_every_intent_broadcasts(self, game, outbox_factory, operation, args):
        """Even no-op intents resynchronize all players."""
        outboxes = [outbox_factory() for _ in range(3)]
        ids = [game.join(f"p{i}", outbox=o)[0] for i, o in enumerate(outboxes)]
        counts = [len(o.frames) for o in outboxes]

        snapshot = getattr(game, operation)(ids[0], *args)

        for outbox, count in zip(outboxes, counts):
            assert len(outbox.frames) == count + 1
            assert outbox.last_state().round == snapshot.round

    def test_leave_broadcasts_to_remaining(self, game, outbox_factory):
        staying = outbox_factory()
        leaving = outbox_factory()
        a, _ = game.join("ada", outbox=staying)
        b, _ = game.join("bob", outbox=leaving)
        sent_to_leaver = len(leaving.frames)

        game.leave(b)

        assert [p.id for p in staying.last_state().players] == [a]
        assert len(leaving.frames) == sent_to_leaver

    def test_failed_sink_is_pruned(self, game, outbox_factory):
        healthy = outbox_factory()
        a, _ = game.join("ada", outbox=healthy)
        b, _ = game.join("bob", outbox=outbox_factory())
        game._state.players[b].outbox = outbox_factory(failing=True)

        game.update_typed(a, "b")

        assert game.snapshot().player_ids == [a]
        assert healthy.last_state().players[-1].id == b
        game.update_typed(a, "br")
        assert [p.id for p in healthy.last_state().players] == [a]

    def test_failed_welcome_drops_newcomer(self, game, outbox_factory):
        watcher = outbox_factory()
        a, _ = game.join("ada", outbox=watcher)

        b, snapshot = game.join("bob", outbox=outbox_factory(failing=True))

        assert game.snapshot().player_ids == [a]
        assert b > a
        assert snapshot.player_ids == [a]
        assert [p.id for p in watcher.last_state().players] == [a]

    def test_states_arrive_in_mutation_order(self, game, outbox_factory):
        outbox = outbox_factory()
        player_id, _ = game.join("ada", outbox=outbox)
        for text in ("b", "br", "bri"):
            game.update_typed(player_id, text)
        game.submit_word(player_id, "bridge")

        typed = [m.data.players[0].typed for m in outbox.messages() if m.type == "State"]
        assert typed == ["", "b", "br", "bri", ""]


class ExplodingDispatcher(BroadcastDispatcher):
    """Fails partway through the first broadcast."""

    def broadcast(self, players, snapshot, exclude=None):
        raise RuntimeError("boom")


class TestStateAccess:
    """A failure inside a mutation poisons the state."""

    def test_poisoned_state_raises(self):
        game = SharedGameState(word_bank=("bridge",), dispatcher=ExplodingDispatcher())

        with pytest.raises(StateAccessError) as excinfo:
            game.join("ada")
        assert isinstance(excinfo.value.__cause__, RuntimeError)

        with pytest.raises(StateAccessError):
            game.snapshot()
        with pytest.raises(StateAccessError):
            game.leave(1)

    def test_seeded_games_are_repeatable(self):
        words = []
        for _ in range(2):
            game = SharedGameState(rng=random.Random(99))
            player_id, snapshot = game.join("ada")
            sequence = [snapshot.current_word]
            for _ in range(5):
                sequence.append(game.submit_word(player_id, sequence[-1]).current_word)
            words.append(sequence)
        assert words[0] == words[1]
