from __future__ import annotations

import datetime as dt
import time
from typing import List

import streamlit as st

from element_games import (
    CatalogError,
    ElementCatalog,
    ElementGamesError,
    ElementRecord,
    Family,
    GameSettings,
    GameType,
    ProgressTracker,
    configure_logging,
    load_elements,
)
from element_games.games import create_session
from element_games.games.bingo import CARD_SIZE, BingoGoal, BingoMode, BingoSpeed
from element_games.games.family_map import FAMILY_HINTS, FamilyMapDifficulty
from element_games.games.pairs import PairsDifficulty
from element_games.games.property_guess import PropertyDifficulty
from element_games.games.quiz import QuizDifficulty
from element_games.progress import Mastery
from element_games.session import Completed, Countdown, SessionSummary

# =========================================================
# App metadata
# =========================================================
APP_VERSION = "v0.1.0"
REFRESH_SECONDS = 0.25

# =========================================================
# Settings + logging
# STREAMLIT_ENV = "prod" hides the debug panel
# =========================================================
SETTINGS = GameSettings.from_env()
configure_logging(SETTINGS)
SHOW_DEBUG_UI = not SETTINGS.is_production

GAME_ICONS = {
    GameType.FLASHCARDS: "🃏",
    GameType.QUIZ: "❓",
    GameType.BINGO: "🎱",
    GameType.FAMILY_MAP: "🗺️",
    GameType.PROPERTY_GUESS: "📏",
    GameType.PAIRS: "🧩",
    GameType.LIGHTNING: "⚡",
}


# =========================================================
# Load elements
# =========================================================
@st.cache_data
def cached_elements(path: str) -> List[ElementRecord]:
    return load_elements(path)


def get_catalog() -> ElementCatalog:
    return ElementCatalog(cached_elements(SETTINGS.data_path))


# =========================================================
# Session state
# =========================================================
def ensure_state():
    st.session_state.setdefault("game_type", GameType.QUIZ)
    st.session_state.setdefault("session", None)
    st.session_state.setdefault("last_summary", None)
    st.session_state.setdefault("ui_message", None)
    if "progress" not in st.session_state:
        st.session_state.progress = ProgressTracker()


def start_game(catalog: ElementCatalog, game_type: GameType, **options):
    session = create_session(game_type, catalog, st.session_state.progress)
    if game_type is GameType.LIGHTNING:
        options.setdefault("seconds", SETTINGS.lightning_seconds)
    session.start(**options)
    st.session_state.session = session
    st.session_state.last_summary = None


def exit_game():
    session = st.session_state.session
    if session is not None:
        st.session_state.last_summary = session.exit()
    st.session_state.session = None


# =========================================================
# Stats
# =========================================================
def stats_panel():
    progress: ProgressTracker = st.session_state.progress
    with st.expander("📊 Progress", expanded=False):
        if not progress.sessions:
            st.caption("No games played yet.")
            return

        st.markdown(
            f"""
**Sessions:** {len(progress.sessions)}
**Answers:** {progress.total_answers} ({progress.accuracy:.1f}% correct)
**Study time:** {progress.study_minutes} min

**Current streak:** {progress.current_streak} day(s)
**Best streak:** {progress.best_streak} day(s)
"""
        )

        st.markdown("**By game:**")
        for gt, (count, mean) in progress.stats_by_game().items():
            if count:
                st.markdown(f"- {GAME_ICONS[gt]} {gt.label}: {count} session(s), {mean:.0f}% avg")

        counts = progress.mastery_counts()
        st.markdown("**Mastery:** " + " • ".join(f"{m.value.replace('_', ' ')}: {counts[m]}" for m in Mastery))
        due = progress.due_for_review(dt.date.today())
        if due:
            st.caption(f"{len(due)} element(s) due for review today.")


def render_summary(summary: SessionSummary):
    gt = summary.game_type
    reason = summary.end_reason.value.replace("_", " ") if summary.end_reason else "-"
    st.success(f"{GAME_ICONS[gt]} **{gt.label}** finished ({reason}). Score: **{summary.score}**")
    cols = st.columns(4)
    cols[0].metric("Correct", f"{summary.correct_count}/{summary.total_count}")
    cols[1].metric("Accuracy", f"{summary.accuracy:.0f}%")
    cols[2].metric("Best streak", summary.best_streak)
    cols[3].metric("Time", f"{summary.duration_seconds // 60}:{summary.duration_seconds % 60:02d}")
    st.caption(f"Average answer time {summary.average_response_seconds:.1f}s • {summary.pace:.1f} answers/min")
    if summary.details:
        with st.expander("Details", expanded=False):
            st.json(dict(summary.details))


# =========================================================
# Per-game renderers
# =========================================================
def render_quiz(session):
    q = session.current_question
    if q is None:
        return
    st.progress(session.progress, text=f"Question {session.cursor + 1} of {len(session.questions)}")
    st.subheader(q.prompt)
    for i, option in enumerate(q.options):
        verdict = session.is_option_correct(option)
        label = option if verdict is None else f"{'✅' if verdict else '▫️'} {option}"
        if st.button(label, key=f"quiz_{q.id}_{i}", use_container_width=True):
            session.select_answer(option)
            st.rerun()
    left, right = st.columns(2)
    if left.button("⬅️ Previous", disabled=not session.can_go_back, use_container_width=True):
        session.previous()
        st.rerun()
    if right.button("Next ➡️", disabled=session.cursor not in session.answers, use_container_width=True):
        session.next()
        st.rerun()


def render_lightning(session):
    if isinstance(session.state, Countdown):
        st.header(f"⚡ {session.state.remaining}")
        return
    st.write(f"⏱️ **{session.time_remaining}s** • 🔥 streak {session.streak} • ⭐ {session.total_score} pts")
    q = session.current_question
    if q is None:
        if session.is_reviewing:
            st.info("✅ Correct!" if session.state.correct else "❌ Wrong")
        return
    st.subheader(q.prompt)
    cols = st.columns(len(q.choices))
    for col, choice in zip(cols, q.choices):
        if col.button(choice, key=f"lightning_{q.id}_{choice}", use_container_width=True):
            session.answer(choice)
            st.rerun()


def render_bingo(session):
    called = session.current_called
    st.write(f"📣 **Called:** {called.name} ({called.symbol})" if called else "📣 Waiting for the first call…")
    for r in range(CARD_SIZE):
        cols = st.columns(CARD_SIZE)
        for c, col in enumerate(cols):
            cell = session.card.cell_at(r, c)
            label = f"✅ {cell.symbol}" if cell.marked else cell.symbol
            if col.button(label, key=f"bingo_{r}_{c}", help=cell.name, use_container_width=True):
                session.manual_mark(cell.element_id)
                st.rerun()
    left, right = st.columns(2)
    if left.button("📣 Call next", disabled=session.is_paused, use_container_width=True):
        session.call_next()
        st.rerun()
    if session.mode is BingoMode.AUTO:
        if right.button("▶️ Resume" if session.is_paused else "⏸️ Pause", use_container_width=True):
            session.toggle_pause()
            st.rerun()
    if session.achieved:
        st.write("🏅 " + ", ".join(p.label for p in session.achieved))


def render_property(session):
    q = session.current_question
    if q is None:
        return
    pt = q.property_type
    st.progress(session.cursor / len(session.questions), text=f"Question {session.cursor + 1} of {len(session.questions)}")
    st.subheader(q.prompt)
    st.caption(pt.spec.description)
    if session.is_playing:
        guess = st.slider(
            pt.label,
            min_value=float(pt.min_value),
            max_value=float(pt.max_value),
            value=float(pt.fallback),
            step=float(pt.step),
            key=f"guess_{q.id}",
        )
        if st.button("Submit guess", use_container_width=True):
            session.submit_guess(guess)
            st.rerun()
    else:
        st.info(
            f"Actual: **{q.correct_value:g} {pt.unit}** • your guess {q.guess:g} • "
            f"{q.tier.value} ({q.score} pts)"
        )
        if st.button("Next ➡️", use_container_width=True):
            session.next()
            st.rerun()


def render_family_map(session):
    item = session.current_item
    if item is None:
        return
    st.progress(session.progress, text=f"Element {session.cursor + 1} of {len(session.items)}")
    st.subheader(f"{item.element.name} ({item.element.symbol}) • #{item.element.atomic_number}")
    if session.is_reviewing:
        if session.state.correct:
            st.success("✅ Correct!")
        else:
            st.error(f"❌ It is {item.correct_family.label}")
        return
    cols = st.columns(2)
    for i, family in enumerate(Family):
        if cols[i % 2].button(family.label, key=f"family_{family.value}", help=FAMILY_HINTS[family], use_container_width=True):
            session.classify(family)
            st.rerun()
    if st.button("⏭️ Skip", use_container_width=True):
        session.skip()
        st.rerun()


def render_flashcards(session):
    card = session.current_card
    if card is None:
        return
    st.progress(session.progress, text=f"Card {session.cursor + 1} of {len(session.cards)}")
    st.header(card.back if session.is_flipped else card.front)
    if st.button("🔄 Flip", use_container_width=True):
        session.flip()
        st.rerun()
    cols = st.columns(3)
    if cols[0].button("⬅️ Back", disabled=not session.can_go_back, use_container_width=True):
        session.previous()
        st.rerun()
    if cols[1].button("❌ Don't know", use_container_width=True):
        session.mark_unknown()
        st.rerun()
    if cols[2].button("✅ Know it", use_container_width=True):
        session.mark_known()
        st.rerun()


def render_pairs(session):
    st.write(f"🧩 **Pairs:** {session.matched_pairs}/{session.total_pairs} • **Moves:** {session.moves}")
    columns = session.difficulty.grid_columns
    for start in range(0, len(session.cards), columns):
        cols = st.columns(columns)
        for offset, col in enumerate(cols):
            pos = start + offset
            if pos >= len(session.cards):
                break
            card = session.cards[pos]
            face_up = card.flipped or card.matched
            label = card.text if face_up else "❔"
            if col.button(label, key=f"pairs_{card.id}", disabled=card.matched, use_container_width=True):
                session.flip(pos)
                st.rerun()


RENDERERS = {
    GameType.FLASHCARDS: render_flashcards,
    GameType.QUIZ: render_quiz,
    GameType.BINGO: render_bingo,
    GameType.FAMILY_MAP: render_family_map,
    GameType.PROPERTY_GUESS: render_property,
    GameType.PAIRS: render_pairs,
    GameType.LIGHTNING: render_lightning,
}


# =========================================================
# Sidebar options per game
# =========================================================
def game_options(game_type: GameType) -> dict:
    if game_type is GameType.QUIZ:
        d = st.radio("Difficulty", list(QuizDifficulty), format_func=lambda x: x.value.capitalize())
        return {"difficulty": d}
    if game_type is GameType.FAMILY_MAP:
        d = st.radio("Difficulty", list(FamilyMapDifficulty), format_func=lambda x: x.value.capitalize())
        return {"difficulty": d}
    if game_type is GameType.PROPERTY_GUESS:
        d = st.radio("Difficulty", list(PropertyDifficulty), format_func=lambda x: x.value.capitalize())
        return {"difficulty": d}
    if game_type is GameType.PAIRS:
        d = st.radio("Difficulty", list(PairsDifficulty), format_func=lambda x: x.value.capitalize())
        return {"difficulty": d}
    if game_type is GameType.BINGO:
        mode = st.radio("Mode", list(BingoMode), format_func=lambda x: x.description)
        speed = st.radio("Speed", list(BingoSpeed), index=1, format_func=lambda x: f"{x.value} ({x.interval}s)")
        goal = st.radio("Play until", list(BingoGoal), format_func=lambda x: x.value.replace("_", " "))
        return {"mode": mode, "speed": speed, "goal": goal}
    if game_type is GameType.FLASHCARDS:
        size = st.slider("Deck size", min_value=5, max_value=30, value=10)
        reverse = st.toggle("Symbol on the front", value=False)
        return {"deck_size": size, "reverse": reverse}
    return {}


def how_to_play():
    with st.expander("❓ How to play", expanded=False):
        st.markdown(
            """
Pick a game in the sidebar and press **Start**.

- 🃏 **Flashcards:** flip the card, then say whether you knew it.
- ❓ **Quiz:** multiple choice; you can go back and change answers.
- 🎱 **Bingo:** elements are called; a line, diagonal or full card wins.
- 🗺️ **Family Map:** put each element in its chemical family.
- 📏 **Guess the Property:** estimate a physical value; closer scores more.
- 🧩 **Pairs:** match each symbol with its atomic number.
- ⚡ **Lightning:** as many answers as you can in 60 seconds.
"""
        )


# =========================================================
# Main
# =========================================================
def main():
    st.set_page_config(page_title="Element Games", page_icon="🧪", layout="wide")

    st.title("🧪 Element Games")
    st.caption("Periodic-table mini-games.")
    how_to_play()

    try:
        catalog = get_catalog()
    except CatalogError as exc:
        st.error(str(exc))
        st.stop()

    ensure_state()
    session = st.session_state.session

    # ---- Sidebar
    with st.sidebar:
        st.subheader("Game")
        game_type = st.radio(
            "Game",
            list(GameType),
            index=list(GameType).index(st.session_state.game_type),
            format_func=lambda gt: f"{GAME_ICONS[gt]} {gt.label}",
            disabled=session is not None,
        )
        st.session_state.game_type = game_type
        options = game_options(game_type)

        if session is None:
            if st.button("▶️ Start", use_container_width=True, type="primary"):
                try:
                    start_game(catalog, game_type, **options)
                except ElementGamesError as exc:
                    st.session_state.ui_message = str(exc)
                st.rerun()
        elif st.button("🚪 Exit game", use_container_width=True):
            exit_game()
            st.rerun()

        stats_panel()

        if SHOW_DEBUG_UI:
            st.divider()
            with st.expander("🛠 Debug", expanded=False):
                st.write(f"Catalog: {len(catalog)} elements from `{SETTINGS.data_path}`")
                if session is not None:
                    st.write(f"State: `{session.state}`")
                    st.write(f"Pending timers: {len(session.scheduler)}")
                    st.write(f"Elapsed: {session.elapsed_seconds:.1f}s")
                if st.button("Reset progress", use_container_width=True):
                    st.session_state.progress.reset()
                    st.rerun()

    if st.session_state.ui_message:
        st.info(st.session_state.ui_message)
        st.session_state.ui_message = None

    if session is None:
        if st.session_state.last_summary is not None:
            render_summary(st.session_state.last_summary)
        else:
            st.caption("Choose a game in the sidebar to begin.")
    else:
        session.tick()
        if isinstance(session.state, Completed):
            st.session_state.last_summary = session.summary()
            st.session_state.session = None
            st.rerun()
        RENDERERS[session.game_type](session)

        # Timers only advance when the script reruns
        if len(session.scheduler):
            time.sleep(REFRESH_SECONDS)
            st.rerun()

    st.markdown("---")
    st.caption(f"🧪 Element Games • {APP_VERSION}")


if __name__ == "__main__":
    main()
