"""
Tests: QuestionService anchor collection, default fill and confidence.

Run with:
    pytest dep_autofill/tests/test_question_service.py -v
"""

import asyncio

import pytest
from dep_autofill.config import Settings
from dep_autofill.constants import NOT_APPLICABLE, SECTION_REGIMES, SKIPPED_ANSWER
from dep_autofill.data.questions import QuestionRegistry
from dep_autofill.models import AnswerMetadata, AnswerSource, Question, QuestionData, Section
from dep_autofill.rules import RuleEngine
from dep_autofill.services.question_service import QuestionService, UnansweredQuestionsError
from dep_autofill.services.section_service import SectionClassifier


def _service(**kwargs) -> QuestionService:
    kwargs.setdefault("classifier", SectionClassifier(max_size=100, debug=False))
    kwargs.setdefault("settings", Settings(prompt_timeout_seconds=1.0))
    return QuestionService(**kwargs)


def _scripted(replies: dict):
    """Prompt collaborator answering from ``replies`` and recording what it was asked."""
    asked: list[str] = []

    async def prompt(payload):
        asked.append(payload.id)
        reply = replies.get(payload.id)
        if isinstance(reply, Exception):
            raise reply
        return reply

    return prompt, asked


class TestPredictAnswers:
    def test_anchors_asked_in_fixed_order(self):
        prompt, asked = _scripted({})
        asyncio.run(_service().predict_answers({}, ["1.1"], prompt))
        assert asked == ["2.6", "2.7", "13.1", "9.1", "7.1", "7.3", SECTION_REGIMES]

    def test_answered_anchors_not_asked(self):
        prompt, asked = _scripted({})
        asyncio.run(_service().predict_answers({"2.6": "No", "7.1": "No"}, ["1.1"], prompt))
        assert "2.6" not in asked
        assert "7.1" not in asked
        # Inference only runs after collection, so 2.7 and 7.3 are still asked
        assert "2.7" in asked and "7.3" in asked

    def test_failures_become_skipped(self):
        prompt, _ = _scripted({
            "2.6": RuntimeError("chat closed"),
            "2.7": "   ",
            "13.1": SKIPPED_ANSWER,
            "9.1": "Third-party service provider",
        })
        result = asyncio.run(_service().predict_answers({}, ["9.3"], prompt))

        for qid in ["2.6", "2.7", "13.1", "7.1", "7.3", SECTION_REGIMES]:
            assert result.answers[qid] == SKIPPED_ANSWER
            assert result.metadata[qid].skipped
        assert result.answers["9.1"] == "Third-party service provider"
        assert result.answers["9.3"] == "Yes"
        assert "9.1" not in result.metadata
        assert result.collected == {"9.1"}

    def test_prompt_timeout_becomes_skipped(self):
        async def slow(payload):
            await asyncio.sleep(5)
            return "Yes"

        service = _service(anchors=["2.6"], settings=Settings(prompt_timeout_seconds=0.01))
        result = asyncio.run(service.predict_answers({}, ["2.6"], slow))
        assert result.answers["2.6"] == SKIPPED_ANSWER
        assert result.metadata["2.6"].skipped

    def test_no_prompt_skips_anchors(self):
        result = asyncio.run(_service().predict_answers({"2.6": "Yes"}, ["2.6", "4.2"]))
        assert result.answers["7.1"] == SKIPPED_ANSWER
        assert result.answers["4.2"] == "Directly from the individual"

    def test_unknown_anchor_is_ignored(self):
        prompt, asked = _scripted({})
        service = _service(anchors=["99.9", "2.6"])
        asyncio.run(service.predict_answers({}, ["1.1"], prompt))
        assert asked == ["2.6"]

    def test_payload_carries_context(self):
        seen = []

        async def prompt(payload):
            seen.append(payload)
            return "No"

        service = _service(anchors=["2.6"])
        service.set_total_questions(120)
        asyncio.run(service.predict_answers({"1.1": "x"}, ["1.1"], prompt))

        payload = seen[0]
        assert payload.label == "Personal Information in Scope"
        assert payload.options == ["Yes", "No"]
        assert payload.answered_count == 1
        assert payload.total_questions == 120
        assert "Why we're asking 2.6" in payload.prompt

    def test_default_fill_marks_defaulted(self):
        result = asyncio.run(_service(anchors=[]).predict_answers({}, ["1.1", "6.1", "99.1"]))
        assert result.answers["1.1"] == "No"
        assert result.answers["99.1"] == NOT_APPLICABLE
        assert all(result.metadata[q].defaulted for q in ["1.1", "6.1", "99.1"])

    def test_blank_existing_answers_are_refilled(self):
        result = asyncio.run(_service(anchors=[]).predict_answers({"1.1": ""}, ["1.1"]))
        assert result.answers["1.1"] == "No"
        assert result.metadata["1.1"].defaulted

    def test_merged_keys_flagged(self):
        result = asyncio.run(_service(anchors=[]).predict_answers({"2.6": "Yes", "2.7": "Yes"}, ["2.9"]))
        assert result.metadata["2.9"].merged
        assert not result.metadata["2.9"].defaulted

    def test_empty_question_ids_uses_registry(self):
        result = asyncio.run(_service(anchors=[]).predict_answers({"2.6": "No"}, []))
        for qid in ["2.6", "2.7", "2.9", "4.1", "4.5", "5.1", "7.1", "7.3", "9.1", "13.1", SECTION_REGIMES]:
            assert qid in result.answers

    def test_unanswered_questions_raise(self):
        service = _service(anchors=[], default_answers={}, settings=Settings(fallback_answer=""))
        with pytest.raises(UnansweredQuestionsError) as exc:
            asyncio.run(service.predict_answers({"1.1": "Yes"}, ["1.1", "1.2", "1.3"]))
        assert exc.value.question_ids == ["1.2", "1.3"]


class TestFullRun:
    def _registry(self):
        def copy_of(source):
            return lambda answers: answers.get(source) if answers.get(source) != SKIPPED_ANSWER else None

        anchors = [Question(id=f"1.{i}", text=f"anchor {i}", section=Section.PROJECT_INFO, priority=i)
                   for i in range(1, 6)]
        inferred = [
            Question(id="1.6", text="from 1.1", section=Section.PROJECT_INFO, infer=copy_of("1.1")),
            Question(id="1.7", text="from 1.6", section=Section.PROJECT_INFO, infer=copy_of("1.6")),
            Question(id="1.8", text="from 1.3", section=Section.PROJECT_INFO, infer=copy_of("1.3")),
            Question(id="1.9", text="from 1.5", section=Section.PROJECT_INFO, infer=copy_of("1.5")),
        ]
        return QuestionRegistry(anchors + inferred)

    def _service(self, registry, **kwargs):
        return _service(
            registry=registry,
            engine=RuleEngine(rules=[], registry=registry),
            default_answers={},
            anchors=[f"1.{i}" for i in range(1, 6)],
            **kwargs,
        )

    def test_every_question_answered(self):
        registry = self._registry()
        prompt, _ = _scripted({f"1.{i}": f"answer {i}" for i in range(1, 6)})
        result = asyncio.run(self._service(registry).predict_answers({}, registry.ids(), prompt))

        assert set(result.answers) == set(registry.ids())
        assert result.answers["1.7"] == "answer 1"
        assert not any(m.defaulted for m in result.metadata.values())

    def test_gap_raises(self):
        registry = self._registry()
        prompt, _ = _scripted({"1.1": "a", "1.2": "b", "1.3": "c", "1.4": "d"})
        service = self._service(registry, settings=Settings(fallback_answer=" ", prompt_timeout_seconds=1.0))
        with pytest.raises(UnansweredQuestionsError) as exc:
            asyncio.run(service.predict_answers({}, registry.ids(), prompt))
        # 1.5 was skipped, so 1.9 has nothing to copy and no default exists
        assert exc.value.question_ids == ["1.9"]


class TestScoreAnswer:
    @pytest.mark.parametrize("answer,meta,user,expected", [
        (SKIPPED_ANSWER, None, True, (0.1, AnswerSource.SKIPPED)),
        ("Yes", AnswerMetadata(skipped=True), False, (0.1, AnswerSource.SKIPPED)),
        ("Yes", None, True, (1.0, AnswerSource.USER)),
        (NOT_APPLICABLE, AnswerMetadata(defaulted=True), False, (0.2, AnswerSource.DEFAULT)),
        (["Internal", "Restricted"], AnswerMetadata(merged=True), False, (0.6, AnswerSource.INFERENCE_MERGED)),
        (NOT_APPLICABLE, None, False, (0.9, AnswerSource.INFERENCE_DIRECT)),
        ("In progress", None, False, (0.7, AnswerSource.INFERENCE)),
    ])
    def test_confidence_table(self, answer, meta, user, expected):
        user_ids = {"4.1"} if user else set()
        assert _service().score_answer("4.1", answer, user_ids, meta) == expected

    def test_skipped_anchor_scores_lowest(self):
        service = _service(anchors=[])
        result = asyncio.run(service.predict_answers({"2.6": SKIPPED_ANSWER}, ["2.6"]))
        assert "2.7" not in result.answers
        confidence, source = service.score_answer("2.6", result.answers["2.6"], {"2.6"}, result.metadata["2.6"])
        assert confidence == 0.1
        assert source == AnswerSource.SKIPPED


def _rows():
    return [
        QuestionData(id="1.1 Project name", question="Project name", answer="Apollo"),
        QuestionData(id="2.6 Is personal information in scope for this initiative? (Single selection allowed) *",
                     question="Is personal information in scope for this initiative?"),
        QuestionData(id="2.7 Is personal health information (PHI) in scope for this initiative? (Single selection allowed) *",
                     question="Is personal health information (PHI) in scope for this initiative?"),
        QuestionData(id="4.2 How will personal information be collected?", question="How will personal information be collected?"),
        QuestionData(id="7.1 Is your initiative building or leveraging AI agents? (Single selection allowed) *",
                     question="Is your initiative building or leveraging AI agents?"),
        QuestionData(id="11.1 General Data Protection Regulation (GDPR)", question="General Data Protection Regulation (GDPR)"),
        QuestionData(id="13.1 Identify any third parties", question="Identify any third parties"),
    ]


class TestAnchorSelection:
    def test_order_and_prefix_match(self):
        selected = _service().select_anchor_questions(_rows(), {})
        assert [q.id.split(" ")[0] for q in selected] == ["2.6", "2.7", "13.1", "7.1", "11.1"]

    def test_existing_answers_excluded(self):
        rows = _rows()
        selected = _service().select_anchor_questions(rows, {rows[1].id: "Yes"})
        assert rows[1] not in selected

    def test_cap(self):
        assert len(_service().select_anchor_questions(_rows(), {}, max_questions=2)) == 2

    def test_regime_keyword_match(self):
        rows = [
            QuestionData(id="10.1 Quebec residents", question="Does Quebec's Law 25 apply?"),
            QuestionData(id="12.1 US health", question="Is HIPAA applicable?"),
        ]
        selected = _service().select_anchor_questions(rows, {})
        assert [q.id for q in selected] == ["10.1 Quebec residents"]

    def test_all_answered(self):
        rows = [QuestionData(id="2.6", question="PI?", answer="Yes")]
        assert _service().select_anchor_questions(rows, {}) == []

    def test_next_unanswered_anchor(self):
        rows = _rows()
        assert _service().find_next_unanswered_anchor(rows).id.startswith("2.6")
        answered = [r.model_copy(update={"answer": "Yes"}) for r in rows]
        assert _service().find_next_unanswered_anchor(answered) is None


class TestPredictFromAnchors:
    def test_rows_get_answers_and_provenance(self):
        outcome = asyncio.run(_service().predict_from_anchors(_rows(), {"2.6": "Yes", "7.1": "No"}))
        rows = {q.id.split(" ")[0]: q for q in outcome.predicted_questions}

        assert rows["1.1"].answer == "Apollo"
        assert rows["1.1"].metadata.source == AnswerSource.USER
        assert rows["2.6"].confidence == 1.0
        assert rows["4.2"].answer == "Directly from the individual"
        assert rows["4.2"].confidence == 0.7
        assert rows["2.7"].answer == SKIPPED_ANSWER
        assert rows["2.7"].confidence == 0.1
        assert rows["11.1"].metadata.defaulted

    def test_prompted_anchors_scored_as_user_answers(self):
        prompt, asked = _scripted({"2.6": "Yes", "7.1": "No"})
        outcome = asyncio.run(_service().predict_from_anchors(_rows(), {}, prompt_for_answer=prompt))
        rows = {q.id.split(" ")[0]: q for q in outcome.predicted_questions}

        assert "2.6" in asked and "7.1" in asked
        for qid in ["2.6", "7.1"]:
            assert rows[qid].confidence == 1.0
            assert rows[qid].metadata.source == AnswerSource.USER
        assert rows["4.2"].confidence == 0.7
        assert rows["2.7"].metadata.source == AnswerSource.SKIPPED
        assert "Why we're asking 2.7" in outcome.next_prompt

    def test_list_answers_joined(self):
        rows = [QuestionData(id="2.9 Data classification", question="Data classification")]
        outcome = asyncio.run(_service().predict_from_anchors(rows, {"2.6": "Yes", "2.7": "Yes"}))
        row = outcome.predicted_questions[0]
        assert row.answer == "Internal, Confidential, Restricted"
        assert row.confidence == 0.6
        assert row.metadata.source == AnswerSource.INFERENCE_MERGED

    def test_next_prompt_points_at_first_missing_anchor(self):
        outcome = asyncio.run(_service().predict_from_anchors(_rows(), {"2.6": "Yes"}))
        assert "Why we're asking 2.7" in outcome.next_prompt

    def test_no_next_prompt_when_anchors_answered(self):
        rows = [QuestionData(id="1.1 Project name", question="Project name")]
        outcome = asyncio.run(_service().predict_from_anchors(rows, {}))
        assert outcome.next_prompt == ""


class TestPrompts:
    def test_anchor_prompt(self):
        text = _service().build_prompt("13.1")
        assert "Why we're asking 13.1" in text
        assert "Available options: No third parties | Yes, one third party | Yes, multiple third parties" in text

    def test_allowed_options_override(self):
        service = _service()
        service.set_allowed_options({"2.6": ["Yes", "No", "Unsure"]})
        assert "Yes | No | Unsure" in service.build_prompt("2.6 Is personal information in scope?")

    def test_basic_prompt_for_other_questions(self):
        text = _service().build_prompt("4.1")
        assert text.startswith("Question 4.1: Which Privacy Commitment")

    def test_free_text(self):
        assert "Free text response" in _service().build_prompt("1.2")


class TestSummarize:
    def test_section_counts(self):
        rows = _rows() + [QuestionData(id="Notes", question="Notes")]
        summary = _service().summarize(rows)
        assert summary.total_questions == 8
        assert summary.pre_existing_answers == 1
        assert summary.section_counts == {"1": 1, "2": 2, "4": 1, "7": 1, "11": 1, "13": 1, "unknown": 1}
