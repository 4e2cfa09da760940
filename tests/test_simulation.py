"""Tests for the round state machine, tick ordering and collision resolution."""

import pytest

from invader import constants as C
from invader.entities import Bunker, Fighter, Minion, Projectile
from invader.simulation import (
    GameState,
    InvaderGame,
    Intents,
    bunker_positions,
    build_roster,
)

from conftest import FixedRandom


def _roster_signature(game):
    return [
        (e.kind, e.x, e.y, e.life, e.marked_for_deletion) for e in game.enemies
    ]


# ============================================================================
# State machine
# ============================================================================


class TestStateMachine:

    def test_new_game_is_idle(self, quiet_rng):
        g = InvaderGame(rng=quiet_rng)
        assert g.state == GameState.IDLE
        assert not g.game_active and not g.game_over
        assert g.snapshot() is None

    def test_advance_is_gated_when_idle(self, quiet_rng):
        g = InvaderGame(rng=quiet_rng)
        assert g.advance(Intents(fire=True)) is False
        assert g.tick == 0
        assert g.projectiles == []

    def test_start_builds_initial_round(self, game):
        assert game.state == GameState.ACTIVE
        assert game.game_active and not game.game_over
        assert game.score == 0
        assert game.player.life == C.MOTHERSHIP_LIFE
        assert (game.player.x, game.player.y) == (350, 50)
        assert len(game.enemies) == 5
        assert isinstance(game.enemies[0], Fighter)
        assert all(isinstance(e, Bunker) for e in game.enemies[1:])
        assert game.minions == game.projectiles == game.particles == []

    def test_bunker_spacing(self):
        xs = bunker_positions(800)
        assert xs == pytest.approx([80, 80 + 640 / 3, 80 + 1280 / 3, 720])
        roster = build_roster(800, 600)
        assert [b.x for b in roster[1:]] == pytest.approx(xs)
        assert all(b.y == 600 - C.BUNKER_Y_OFFSET for b in roster[1:])
        assert [b.slot for b in roster[1:]] == [0, 1, 2, 3]
        assert (roster[0].x, roster[0].y) == (400, 450)

    def test_reset_reproduces_initial_roster(self, game):
        initial = _roster_signature(game)
        player0 = (game.player.x, game.player.y, game.player.life)

        game.player.stock = 4
        for _ in range(30):
            game.advance(Intents(right=True, fire=True, deploy=True))
        game.enemies[1].take_damage(1)
        game.score = 1234

        game.reset()
        assert game.state == GameState.ACTIVE
        assert _roster_signature(game) == initial
        assert (game.player.x, game.player.y, game.player.life) == player0
        assert game.player.stock == 0
        assert game.minions == game.projectiles == game.particles == []
        assert game.score == 0
        assert game.result is None

    def test_restart_from_over(self, game):
        game.player.life = 0
        game.advance()
        assert game.game_over
        game.reset()
        assert game.game_active
        assert game.player.life == C.MOTHERSHIP_LIFE

    def test_round_ends_only_once(self, game):
        game.player.life = 0
        assert game.advance() is True
        result = game.result
        game.end_game(True, "again")
        assert game.result is result
        assert game.advance() is False


# ============================================================================
# Terminal conditions
# ============================================================================


class TestTerminalConditions:

    def test_breach_wins_and_short_circuits_tick(self, game):
        game.minions.append(Minion(x=100, y=game.height, speed_x=0.0))
        shot = Projectile(x=10, y=300, speed=-5)
        game.projectiles.append(shot)
        fighter = game.fighter
        fighter_state = (fighter.x, fighter.shoot_timer)

        assert game.advance() is True

        assert game.game_over
        assert game.result.win
        assert game.result.reason == C.REASON_BREACH
        assert game.result.title == C.TITLE_WIN
        # Nothing after the minion phase ran
        assert (fighter.x, fighter.shoot_timer) == fighter_state
        assert shot.y == 300
        assert game.particles == []

    def test_minion_on_bottom_edge_is_not_a_breach(self, game):
        game.minions.append(Minion(x=100, y=game.height - 1, speed_x=0.0))
        game.advance()
        assert game.game_active

    def test_elimination_wins(self, game):
        for enemy in game.enemies:
            enemy.take_damage(enemy.life)
        shot = Projectile(x=10, y=300, speed=-5)
        game.projectiles.append(shot)

        game.advance()

        assert game.enemies == []
        assert game.game_over
        assert game.result.win
        assert game.result.reason == C.REASON_ELIMINATED
        assert shot.y == 300

    def test_elimination_reported_on_tick_after_last_kill(self, game):
        for enemy in game.enemies:
            enemy.life = 1
        for enemy in game.enemies:
            game.projectiles.append(Projectile(
                x=enemy.x + 1, y=enemy.y + 1 - C.PLAYER_PROJECTILE_SPEED,
                speed=C.PLAYER_PROJECTILE_SPEED, friendly=True,
            ))
        game.advance()
        # all five were hit during collision resolution of this tick
        assert all(e.marked_for_deletion for e in game.enemies)
        assert game.score == 5 * C.SCORE_PROJECTILE_HIT
        assert game.game_active

        game.advance()
        assert game.game_over
        assert game.result.reason == C.REASON_ELIMINATED

    def test_mothership_destroyed_loses(self, game):
        game.player.life = 1
        game.projectiles.append(Projectile(x=400, y=70, speed=-5))
        game.advance()
        assert game.player.life == 0
        assert game.game_over
        assert not game.result.win
        assert game.result.reason == C.REASON_DESTROYED
        assert game.result.title == C.TITLE_LOSS

    def test_loss_by_repeated_hits(self, game):
        game.player.life = 3
        for i in range(3):
            game.projectiles.append(Projectile(x=360 + i * 10, y=70, speed=-5))
        game.advance()
        assert game.player.life == 0
        assert game.game_over and not game.result.win

    def test_breach_checked_before_loss(self, game):
        game.player.life = 0
        game.minions.append(Minion(x=100, y=game.height, speed_x=0.0))
        game.advance()
        assert game.result.win
        assert game.result.reason == C.REASON_BREACH


# ============================================================================
# Tick ordering / cleanup
# ============================================================================


class TestTick:

    def test_tick_counter_and_deploy_through_advance(self, game):
        game.player.stock = 3
        game.advance(Intents(deploy=True))
        assert game.tick == 1
        assert len(game.minions) == 3
        assert game.player.stock == 0
        # deployed minions already moved this tick
        assert game.minions[0].y == game.player.y + game.player.height + C.MINION_DESCENT_SPEED

    def test_removed_entity_is_filtered_once_and_never_updated(self, game):
        doomed = Minion(x=100, y=200)
        survivor = Minion(x=300, y=200, speed_x=0.0)
        game.minions.extend([doomed, survivor])
        doomed.take_damage(1)
        y_before = doomed.y

        game.advance()
        game.advance()

        assert doomed not in game.minions
        assert survivor in game.minions
        assert doomed.y == y_before

    def test_projectiles_leave_play_area(self, game):
        shot = Projectile(x=10, y=-40, speed=-15)
        game.projectiles.append(shot)
        game.advance()
        assert shot not in game.projectiles

    def test_particles_expire(self, game):
        game.create_explosion(100, 100, C.COLOR_IMPACT, 3)
        for _ in range(25):
            game.advance()
        assert game.particles == []

    def test_fighter_removed_permanently(self, game):
        game.fighter.take_damage(3)
        game.advance()
        assert game.fighter is None
        assert len(game.enemies) == 4
        for _ in range(10):
            game.advance()
        assert game.fighter is None


# ============================================================================
# Collision resolution
# ============================================================================


class TestProjectileCollisions:

    def test_friendly_hit_on_enemy(self, game):
        bunker = game.bunkers[0]
        shot = Projectile(x=bunker.x + 10, y=bunker.y + 5, speed=15, friendly=True)
        game.projectiles.append(shot)
        game.check_collisions()
        assert shot.marked_for_deletion
        assert bunker.life == C.BUNKER_LIFE - 1
        assert game.score == C.SCORE_PROJECTILE_HIT
        assert len(game.particles) == C.BURST_HIT
        assert game.events["hits"] == 1

    def test_friendly_shot_scores_once_against_overlapping_enemies(self, game):
        fighter, bunker = game.fighter, game.bunkers[0]
        fighter.x, fighter.y = bunker.x, bunker.y
        shot = Projectile(x=bunker.x + 10, y=bunker.y + 5, speed=15, friendly=True)
        game.projectiles.append(shot)
        game.check_collisions()
        assert fighter.life == C.FIGHTER_LIFE - 1
        assert bunker.life == C.BUNKER_LIFE
        assert game.score == C.SCORE_PROJECTILE_HIT

    def test_friendly_fire_kills_minion_even_after_enemy_hit(self, game):
        bunker = game.bunkers[0]
        shot = Projectile(x=bunker.x + 10, y=bunker.y - 10, speed=15, friendly=True)
        minion = Minion(x=bunker.x + 5, y=bunker.y - 25)
        game.projectiles.append(shot)
        game.minions.append(minion)
        game.check_collisions()
        assert bunker.life == C.BUNKER_LIFE - 1
        assert minion.marked_for_deletion
        assert game.events["minions_lost"] == 1

    def test_enemy_hit_on_player(self, game):
        shot = Projectile(x=400, y=70, speed=-5)
        game.projectiles.append(shot)
        game.check_collisions()
        assert shot.marked_for_deletion
        assert game.player.life == C.MOTHERSHIP_LIFE - 1
        assert game.score == 0
        assert len(game.particles) == C.BURST_HIT

    def test_enemy_hit_on_minion(self, game):
        minion = Minion(x=200, y=300)
        shot = Projectile(x=205, y=305, speed=-5)
        game.minions.append(minion)
        game.projectiles.append(shot)
        game.check_collisions()
        assert shot.marked_for_deletion
        assert minion.marked_for_deletion
        assert game.score == 0
        assert len(game.particles) == C.BURST_MINION

    def test_minion_hit_by_two_shots_is_lost_once(self, game):
        minion = Minion(x=200, y=300)
        shots = [Projectile(x=205, y=305, speed=-5), Projectile(x=206, y=305, speed=-5)]
        game.minions.append(minion)
        game.projectiles.extend(shots)
        game.check_collisions()
        assert all(s.marked_for_deletion for s in shots)
        assert minion.marked_for_deletion
        assert len(game.particles) == 2 * C.BURST_MINION
        assert game.events["minions_lost"] == 1

    def test_enemy_shot_does_not_hurt_enemies(self, game):
        bunker = game.bunkers[0]
        game.projectiles.append(Projectile(x=bunker.x + 10, y=bunker.y + 5, speed=-5))
        game.check_collisions()
        assert bunker.life == C.BUNKER_LIFE

    def test_touching_edges_is_not_a_hit(self, game):
        bunker = game.bunkers[0]
        shot = Projectile(x=bunker.x + 10, y=bunker.y - 15, speed=15, friendly=True)
        game.projectiles.append(shot)
        game.check_collisions()
        assert not shot.marked_for_deletion
        assert bunker.life == C.BUNKER_LIFE


class TestKamikaze:

    def test_minion_enemy_overlap(self, game):
        bunker = game.bunkers[2]
        minion = Minion(x=bunker.x + 5, y=bunker.y - 10)
        game.minions.append(minion)
        game.check_collisions()
        assert minion.marked_for_deletion
        assert bunker.life == C.BUNKER_LIFE - 1
        assert game.score == C.SCORE_KAMIKAZE
        assert len(game.particles) == C.BURST_KAMIKAZE

    def test_every_overlapping_pair_counts(self, game):
        bunker = game.bunkers[1]
        game.minions.extend([
            Minion(x=bunker.x + 5, y=bunker.y - 10),
            Minion(x=bunker.x + 30, y=bunker.y + 10),
        ])
        game.check_collisions()
        assert bunker.life == C.BUNKER_LIFE - 2
        assert game.score == 2 * C.SCORE_KAMIKAZE
        assert game.events["kamikaze"] == 2

    def test_minion_overlapping_two_enemies_damages_both(self, game):
        fighter, bunker = game.fighter, game.bunkers[0]
        fighter.x, fighter.y = bunker.x, bunker.y
        game.minions.append(Minion(x=bunker.x + 5, y=bunker.y + 5))
        game.check_collisions()
        assert fighter.life == C.FIGHTER_LIFE - 1
        assert bunker.life == C.BUNKER_LIFE - 1
        assert game.score == 2 * C.SCORE_KAMIKAZE


# ============================================================================
# HUD snapshot / intents
# ============================================================================


class TestSnapshot:

    def test_initial_snapshot(self, game):
        snap = game.snapshot()
        assert snap.health == C.MOTHERSHIP_LIFE
        assert snap.stock == 0 and not snap.stock_ready
        assert snap.active_minions == 0
        assert snap.fighter_life == C.FIGHTER_LIFE
        assert snap.fighter_label == str(C.FIGHTER_LIFE)
        assert snap.bunkers_remaining == 4
        assert snap.score == 0
        assert snap.cooldown_ready == 1.0
        assert snap.state == GameState.ACTIVE
        assert snap.result is None

    def test_snapshot_after_losses(self, game):
        game.fighter.take_damage(3)
        game.bunkers[0].take_damage(3)
        game.player.stock = 2
        game.advance(Intents(fire=True))
        snap = game.snapshot()
        assert snap.fighter_life is None
        assert snap.fighter_label == C.FIGHTER_DESTROYED_LABEL
        assert snap.bunkers_remaining == 3
        assert snap.stock_ready
        assert snap.cooldown_ready == pytest.approx(1 / C.MOTHERSHIP_COOLDOWN)

    def test_snapshot_carries_result(self, game):
        game.player.life = 0
        game.score = 150
        game.advance()
        snap = game.snapshot()
        assert snap.state == GameState.OVER
        assert snap.result.score == 150
        assert not snap.result.win


class TestIntents:

    def test_from_action(self):
        assert Intents.from_action([1, 0, 1, 0]) == Intents(left=True, fire=True)

    def test_from_action_rejects_wrong_length(self):
        with pytest.raises(ValueError):
            Intents.from_action([1, 0])


def test_play_area_must_fit_roster():
    with pytest.raises(AssertionError):
        InvaderGame(50, 50, rng=FixedRandom())
