"""
StudyVerse - Gamified Study Planner

Streamlit application: turn a syllabus into a lesson map, study each level
in a timed focus session, and collect XP and streaks.

Usage:
    streamlit run app.py
"""

import logging
import time

import streamlit as st

from studyverse.classroom import (
    AppNavigator,
    LessonGraph,
    Page,
    ProgressStore,
    ProgressTracker,
    open_session,
)
from studyverse.config import load_settings
from studyverse.errors import InvalidTransitionError, NoProfileError, NotFoundError
from studyverse.generation import ContentGenerator
from studyverse.schemas import ChatMessage, LessonStatus, NOVA_GREETING, SessionResult, SetupForm
from studyverse.viewer import (
    avatar_url,
    celebration_message,
    get_map_css,
    render_lesson_node,
    render_leaderboard_entry,
    render_quest,
    render_stats_bar,
    render_timer_ring,
)


# -----------------------------------------------------------------------------
# Configuration
# -----------------------------------------------------------------------------

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

st.set_page_config(
    page_title="StudyVerse",
    page_icon="🗺️",
    layout="centered",
    initial_sidebar_state="collapsed",
)


# -----------------------------------------------------------------------------
# Session State Initialization
# -----------------------------------------------------------------------------

def init_session_state():
    """Initialize session state variables."""
    if "navigator" not in st.session_state:
        settings = load_settings()
        store = ProgressStore.open(settings.db_path)
        st.session_state.lessons = LessonGraph(store)
        st.session_state.tracker = ProgressTracker(store)
        st.session_state.generator = ContentGenerator.from_settings(settings)
        st.session_state.navigator = AppNavigator(
            st.session_state.lessons,
            st.session_state.tracker,
            st.session_state.generator,
        )

    if "focus_session" not in st.session_state:
        st.session_state.focus_session = None

    if "chat_history" not in st.session_state:
        st.session_state.chat_history = [NOVA_GREETING]


def close_focus_session():
    """Stop and discard the current focus session, if any."""
    session = st.session_state.focus_session
    if session is not None:
        session.close()
    st.session_state.focus_session = None
    st.session_state.chat_history = [NOVA_GREETING]


def recover(error: Exception):
    close_focus_session()
    st.session_state.navigator.recover(error)
    st.rerun()


# -----------------------------------------------------------------------------
# Landing + Setup
# -----------------------------------------------------------------------------

def render_landing():
    st.title("🗺️ StudyVerse")
    st.markdown("Turn your syllabus into an adventure. Focus, level up, keep the streak alive.")
    if st.button("GET STARTED", type="primary", use_container_width=True):
        st.session_state.navigator.begin_setup()
        st.rerun()


def render_setup():
    st.title("Build your world")

    with st.form("setup"):
        syllabus = st.text_area(
            "Paste your syllabus",
            placeholder="e.g.\n1. Introduction to Anatomy\n2. The Nervous System\n3. ...",
            height=200,
        )
        days = st.slider("Days until the exam", min_value=1, max_value=120, value=30)
        hours = st.number_input("Daily study goal (hours)", min_value=0.1, value=2.0, step=0.5)
        hardest = st.text_input("Hardest subject", placeholder="e.g. Quantum Physics, Organic Chemistry")
        favorite = st.text_input("Favorite subject")
        submitted = st.form_submit_button("GENERATE WORLD", type="primary", use_container_width=True)

    if not submitted:
        return
    if not syllabus.strip():
        st.error("Paste a syllabus to continue.")
        return

    form = SetupForm(
        syllabus=syllabus,
        days=days,
        daily_goal_hours=hours,
        hardest_subject=hardest,
        favorite_subject=favorite,
    )
    with st.spinner("BUILDING ADVENTURE..."):
        st.session_state.navigator.complete_setup(form)
    st.rerun()


# -----------------------------------------------------------------------------
# Map
# -----------------------------------------------------------------------------

def render_map():
    tracker = st.session_state.tracker
    lessons = st.session_state.lessons

    user = tracker.get_user()
    if user is None:
        recover(NoProfileError())
        return

    st.markdown(get_map_css(), unsafe_allow_html=True)
    col1, col2 = st.columns([1, 4])
    with col1:
        st.image(avatar_url(user.avatar_config), width=64)
    with col2:
        st.markdown(render_stats_bar(user), unsafe_allow_html=True)

    stats = lessons.get_completion_stats()
    st.progress(stats["completion_percent"] / 100)

    tab_map, tab_quests, tab_rank, tab_avatar = st.tabs(["Map", "Quests", "Rank", "Avatar"])

    with tab_map:
        for index, lesson in enumerate(lessons.list_lessons()):
            st.markdown(render_lesson_node(lesson, index), unsafe_allow_html=True)
            if lesson.status != LessonStatus.LOCKED:
                label = "START" if lesson.status == LessonStatus.OPEN else "REPLAY"
                if st.button(label, key=f"lesson_{lesson.id}", use_container_width=True):
                    if st.session_state.navigator.select_lesson(lesson.id):
                        st.rerun()

    with tab_quests:
        st.subheader("DAILY QUESTS")
        for quest in tracker.get_daily_quests():
            st.markdown(render_quest(quest), unsafe_allow_html=True)

    with tab_rank:
        st.subheader("LEADERBOARD")
        for entry in tracker.get_leaderboard():
            st.markdown(render_leaderboard_entry(entry), unsafe_allow_html=True)

    with tab_avatar:
        render_avatar_editor()


def render_avatar_editor():
    description = st.text_input("Describe your avatar", placeholder="a wizard with pink hair and glasses")
    if st.button("Generate avatar") and description.strip():
        config = st.session_state.generator.generate_avatar_config(description)
        st.session_state.tracker.update_avatar(config)
        st.rerun()


# -----------------------------------------------------------------------------
# Lesson Session
# -----------------------------------------------------------------------------

def on_session_finished(result):
    logger.info(f"Session result: {result.lesson_id} +{result.xp_awarded} XP")


def render_lesson_session():
    nav = st.session_state.navigator
    lesson = st.session_state.lessons.get_lesson(nav.active_lesson_id or "")
    if lesson is None:
        recover(NotFoundError(nav.active_lesson_id or ""))
        return

    session = st.session_state.focus_session
    if session is None or session.lesson_id != lesson.id:
        close_focus_session()
        try:
            session = open_session(
                lesson.id,
                st.session_state.lessons,
                st.session_state.tracker,
                on_finished=on_session_finished,
            )
        except NotFoundError as e:
            recover(e)
            return
        st.session_state.focus_session = session

    if st.button("← ABORT"):
        close_focus_session()
        nav.exit_lesson()
        st.rerun()

    if session.result is not None:
        render_celebration(lesson.title, session.result)
        return

    st.caption("CURRENT OBJECTIVE")
    st.header(lesson.title)
    st.markdown(render_timer_ring(session), unsafe_allow_html=True)

    try:
        if session.remaining_seconds == session.initial_duration_seconds and not session.is_active:
            if st.button("START SESSION", type="primary", use_container_width=True):
                session.start()
                st.rerun()
        else:
            col1, col2 = st.columns(2)
            with col1:
                if st.button("PAUSE" if session.is_active else "RESUME", use_container_width=True):
                    session.toggle()
                    st.rerun()
            with col2:
                if st.button("COMPLETE", use_container_width=True):
                    session.finish()
                    st.rerun()
    except InvalidTransitionError as e:
        logger.warning(f"Ignored session action: {e}")

    render_tutor_chat(lesson.title)

    if session.is_active:
        time.sleep(1)
        st.rerun()


def render_celebration(title: str, result: SessionResult):
    st.balloons()
    st.success(celebration_message(title, result))
    if st.button("CONTINUE", type="primary", use_container_width=True):
        close_focus_session()
        st.session_state.navigator.exit_lesson()
        st.rerun()


def render_tutor_chat(lesson_title: str):
    with st.expander("💬 Ask Nova"):
        history: list[ChatMessage] = st.session_state.chat_history
        for message in history:
            with st.chat_message("assistant" if message.role == "model" else "user"):
                st.markdown(message.text)

        prompt = st.chat_input("Ask anything about this lesson")
        if prompt:
            reply = st.session_state.generator.chat_with_tutor(history, lesson_title, prompt)
            history.append(ChatMessage(role="user", text=prompt))
            history.append(ChatMessage(role="model", text=reply))
            st.rerun()


# -----------------------------------------------------------------------------
# Main App
# -----------------------------------------------------------------------------

def main():
    """Main application entry point."""
    init_session_state()
    page = st.session_state.navigator.page

    if page == Page.LANDING:
        render_landing()
    elif page == Page.SETUP:
        render_setup()
    elif page == Page.MAP:
        render_map()
    elif page == Page.LESSON:
        render_lesson_session()


if __name__ == "__main__":
    main()
