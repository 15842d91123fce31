"""Single-page student client served by the API."""

from quiz_arena.constants.quiz_constants import RESULT_PAGE_LEADERBOARD_SIZE

_STUDENT_PAGE_TEMPLATE = """<!doctype html>
<html lang="en">
  <head>
    <meta charset="utf-8" />
    <title>QuizArena</title>
    <meta name="viewport" content="width=device-width, initial-scale=1" />
    <style>
      :root { font-family: 'Inter', system-ui, sans-serif; background: #f5f7ff; color: #1f2937; }
      body { margin: 0 auto; padding: 1.5rem; max-width: 48rem; display: flex; flex-direction: column; gap: 1rem; }
      .card { background: #fff; border-radius: 0.75rem; padding: 1.5rem; box-shadow: 0 0.25rem 1rem rgba(0, 0, 0, 0.08); }
      .hidden { display: none; }
      button { border: none; border-radius: 0.5rem; padding: 0.6rem 1.2rem; font-size: 1rem; background: #4f46e5; color: #fff; cursor: pointer; }
      button.secondary { background: #fff; color: #4f46e5; border: 1px solid #4f46e5; }
      button:disabled { opacity: 0.5; cursor: not-allowed; }
      input { padding: 0.6rem; font-size: 1rem; border: 1px solid #d1d5db; border-radius: 0.5rem; width: 100%; box-sizing: border-box; }
      .quiz-row { display: flex; justify-content: space-between; align-items: center; padding: 0.75rem 0; border-bottom: 1px solid #eee; }
      .option { display: block; width: 100%; text-align: left; margin: 0.35rem 0; background: #fff; color: #374151; border: 1px solid #e5e7eb; }
      .option.selected { background: #4f46e5; color: #fff; }
      #timer { font-weight: bold; font-size: 1.25rem; }
      #timer.critical { color: #dc2626; }
      .correct { color: #15803d; }
      .wrong { color: #dc2626; }
      .badge { display: inline-block; padding: 0.2rem 0.6rem; border-radius: 999px; background: #fef3c7; margin-right: 0.4rem; }
      .error { color: #dc2626; min-height: 1.25rem; }
    </style>
    <script>
      window.MathJax = { tex: { inlineMath: [['$','$']], displayMath: [['$$','$$']] } };
    </script>
    <script defer src="https://cdn.jsdelivr.net/npm/mathjax@3/es5/tex-mml-chtml.js"></script>
  </head>
  <body>
    <section class="card" id="dashboard-card">
      <h1>Student Dashboard</h1>
      <label for="student-name">Your name</label>
      <input id="student-name" placeholder="John Doe" />
      <p id="progress"></p>
      <h2>Available quizzes</h2>
      <div id="quiz-list">Loading...</div>
      <p id="dashboard-error" class="error"></p>
    </section>
    <section class="card hidden" id="quiz-card">
      <div class="quiz-row"><h2 id="quiz-title"></h2><span id="timer"></span></div>
      <div id="questions"></div>
      <p id="quiz-error" class="error"></p>
      <button id="quit-button" class="secondary">Quit</button>
      <button id="submit-button" disabled>Submit Quiz</button>
    </section>
    <section class="card hidden" id="result-card">
      <h2 id="result-title"></h2>
      <p id="result-score"></p>
      <div id="review"></div>
      <a id="scorecard-link" href="#">Download scorecard (PDF)</a>
      <h3>Leaderboard</h3>
      <ol id="leaderboard"></ol>
      <button id="back-button">Back to dashboard</button>
    </section>
    <script>
      const el = (id) => document.getElementById(id);
      let sessionId = null;
      let pollHandle = null;

      function show(card) {
        for (const id of ['dashboard-card', 'quiz-card', 'result-card']) {
          el(id).classList.toggle('hidden', id !== card);
        }
      }

      async function api(path, options = {}) {
        const response = await fetch(path, {
          headers: { 'Content-Type': 'application/json' },
          ...options,
        });
        const body = response.status === 204 ? null : await response.json();
        if (!response.ok) {
          throw new Error((body && body.detail) || 'Request failed');
        }
        return body;
      }

      function formatTime(seconds) {
        const m = Math.floor(seconds / 60);
        const s = seconds % 60;
        return `${m}:${String(s).padStart(2, '0')}`;
      }

      async function loadDashboard() {
        show('dashboard-card');
        const quizzes = await api('/quizzes');
        const list = el('quiz-list');
        list.innerHTML = quizzes.length ? '' : '<p>No quizzes available right now.</p>';
        for (const quiz of quizzes) {
          const row = document.createElement('div');
          row.className = 'quiz-row';
          row.innerHTML = `<div><strong></strong><br><small>${quiz.question_count} questions · ${quiz.duration_minutes} Mins · ${quiz.difficulty}</small></div>`;
          row.querySelector('strong').textContent = quiz.title;
          const button = document.createElement('button');
          button.textContent = 'Start';
          button.onclick = () => startQuiz(quiz.id);
          row.appendChild(button);
          list.appendChild(row);
        }
        await loadProgress();
      }

      async function loadProgress() {
        const name = el('student-name').value.trim();
        if (!name) { el('progress').textContent = ''; return; }
        const progress = await api(`/students/${encodeURIComponent(name)}/progress`);
        const container = el('progress');
        container.textContent = `Streak: ${progress.streak_days} day(s) `;
        for (const label of progress.badges) {
          const badge = document.createElement('span');
          badge.className = 'badge';
          badge.textContent = label;
          container.appendChild(badge);
        }
      }

      async function startQuiz(quizId) {
        el('dashboard-error').textContent = '';
        try {
          const session = await api('/sessions', {
            method: 'POST',
            body: JSON.stringify({ quiz_id: quizId, student_name: el('student-name').value }),
          });
          sessionId = session.session_id;
          const quiz = await api(`/quizzes/${quizId}`);
          renderQuiz(quiz);
          renderSession(session);
          show('quiz-card');
          pollHandle = setInterval(refreshSession, 1000);
        } catch (error) {
          el('dashboard-error').textContent = error.message;
        }
      }

      function renderQuiz(quiz) {
        el('quiz-title').textContent = quiz.title;
        const container = el('questions');
        container.innerHTML = '';
        quiz.questions.forEach((question, qIndex) => {
          const block = document.createElement('div');
          block.innerHTML = `<h3>Question ${qIndex + 1}</h3>${question.text_html}`;
          question.options.forEach((option, oIndex) => {
            const button = document.createElement('button');
            button.className = 'option';
            button.dataset.question = qIndex;
            button.dataset.option = oIndex;
            button.textContent = option;
            button.onclick = () => selectAnswer(qIndex, oIndex);
            block.appendChild(button);
          });
          container.appendChild(block);
        });
        if (window.MathJax && MathJax.typesetPromise) { MathJax.typesetPromise(); }
      }

      function renderSession(session) {
        const timer = el('timer');
        timer.textContent = formatTime(session.remaining_seconds);
        timer.classList.toggle('critical', session.remaining_seconds < 60);
        document.querySelectorAll('.option').forEach((button) => {
          const selected = session.answers[Number(button.dataset.question)] === Number(button.dataset.option);
          button.classList.toggle('selected', selected);
        });
        el('submit-button').disabled = !session.is_complete;
        if (session.state === 'finished') {
          showResult(session);
        }
      }

      async function refreshSession() {
        if (!sessionId) return;
        try {
          renderSession(await api(`/sessions/${sessionId}`));
        } catch (error) {
          el('quiz-error').textContent = error.message;
        }
      }

      async function selectAnswer(questionIndex, optionIndex) {
        try {
          renderSession(await api(`/sessions/${sessionId}/answers`, {
            method: 'POST',
            body: JSON.stringify({ question_index: questionIndex, option_index: optionIndex }),
          }));
        } catch (error) {
          el('quiz-error').textContent = error.message;
        }
      }

      async function submitQuiz() {
        try {
          showResult(await api(`/sessions/${sessionId}/submit`, { method: 'POST' }));
        } catch (error) {
          el('quiz-error').textContent = error.message;
        }
      }

      async function quitQuiz() {
        if (!confirm('Quit quiz? Progress will be lost.')) return;
        await api(`/sessions/${sessionId}`, { method: 'DELETE' });
        clearInterval(pollHandle);
        sessionId = null;
        await loadDashboard();
      }

      async function showResult(session) {
        clearInterval(pollHandle);
        const result = session.result;
        el('result-title').textContent = 'Quiz Completed!';
        el('result-score').textContent = `${result.score} / ${result.total} (${result.percentage}%)`;
        const review = el('review');
        review.innerHTML = '';
        session.review.forEach((item, i) => {
          const row = document.createElement('div');
          const number = document.createElement('strong');
          number.textContent = `${i + 1}. `;
          const status = document.createElement('span');
          status.className = item.is_correct ? 'correct' : 'wrong';
          status.textContent = item.is_unanswered ? 'Not answered' : (item.is_correct ? 'Correct' : 'Incorrect');
          row.append(number, status);
          if (!item.is_correct) {
            const fix = document.createElement('div');
            fix.textContent = `Correct: ${item.correct_option}`;
            row.appendChild(fix);
          }
          const explanation = document.createElement('div');
          explanation.innerHTML = item.explanation_html;
          row.appendChild(explanation);
          review.appendChild(row);
        });
        el('scorecard-link').href = `/sessions/${session.session_id}/scorecard.pdf`;
        const board = await api(`/quizzes/${session.quiz_id}/leaderboard?limit=__LEADERBOARD_SIZE__`);
        el('leaderboard').innerHTML = '';
        for (const entry of board) {
          const item = document.createElement('li');
          item.textContent = `${entry.student_name}: ${entry.score} / ${entry.total}`;
          el('leaderboard').appendChild(item);
        }
        show('result-card');
      }

      el('submit-button').onclick = submitQuiz;
      el('quit-button').onclick = quitQuiz;
      el('back-button').onclick = async () => {
        const finished = sessionId;
        sessionId = null;
        if (finished) {
          await api(`/sessions/${finished}`, { method: 'DELETE' }).catch(() => {});
        }
        await loadDashboard();
      };
      window.addEventListener('pagehide', () => {
        if (sessionId) {
          fetch(`/sessions/${sessionId}`, { method: 'DELETE', keepalive: true });
        }
      });
      el('student-name').onchange = loadProgress;
      loadDashboard();
    </script>
  </body>
</html>
"""

STUDENT_PAGE_HTML = _STUDENT_PAGE_TEMPLATE.replace("__LEADERBOARD_SIZE__", str(RESULT_PAGE_LEADERBOARD_SIZE))
