"""
Unit tests for GitHubFormatter reconciliation.
"""

from unittest.mock import Mock

import pytest

from manifest.exceptions import ReconciliationError
from manifest.formatting.github import GitHubFormatter, render_comment
from manifest.models.result import Comment, Result
from manifest.models.review import AnnotationKind, strike


def line_result(*comments):
    return Result(comments=list(comments))


def run_once(formatter, entry, results):
    formatter.before_all(entry)
    for source, result in results.items():
        formatter.format(source, entry, result)
    formatter.after_all(entry)


class TestRenderComment:
    """Unit tests for comment body rendering."""

    def test_layout(self):
        body = render_comment("manifest:lint", "lint", [Comment(text="first\nsecond", severity="Error")])

        assert body == (
            "<!-- manifest:lint -->\n"
            "\n"
            "> [!CAUTION]\n"
            "> first\n"
            "> second\n"
            "\n"
            "<sub>This comment was generated by the `lint` checker using manifest</sub>"
        )

    def test_callouts_per_severity(self):
        body = render_comment("manifest:lint", "lint", [
            Comment(text="a", severity="Warn"),
            Comment(text="b", severity="Info"),
        ])

        assert "> [!WARNING]\n> a" in body
        assert "> [!TIP]\n> b" in body


class TestGitHubFormatter:
    """Unit tests for posting and resolving comments."""

    def test_posts_line_and_top_level_comments(self, review_host, pull_import):
        """Test a first run posts one comment per diagnostic location."""
        formatter = GitHubFormatter(review_host)
        result = line_result(
            Comment(file="a.go", line=10, side="RIGHT", text="unused var", severity="Error"),
            Comment(text="consider splitting this PR", severity="Warn"),
        )

        run_once(formatter, pull_import, {"lint": result})

        assert len(review_host.posted_lines) == 1
        line_comment = review_host.posted_lines[0]
        assert line_comment.path == "a.go"
        assert line_comment.line == 10
        assert line_comment.side == "RIGHT"
        assert line_comment.commit_sha == "abc123"
        assert line_comment.number == 7
        assert line_comment.body.startswith("<!-- manifest:lint:a.go:10:RIGHT -->")

        assert len(review_host.posted_threads) == 1
        assert review_host.posted_threads[0].startswith("<!-- manifest:lint -->")
        assert review_host.resolved == []

    def test_second_identical_run_posts_nothing(self, review_host, pull_import):
        formatter = GitHubFormatter(review_host)
        result = line_result(Comment(file="a.go", line=10, side="RIGHT", text="unused var", severity="Error"))

        run_once(formatter, pull_import, {"lint": result})
        run_once(formatter, pull_import, {"lint": result})

        assert len(review_host.posted_lines) == 1
        assert review_host.resolved == []

    def test_changed_wording_is_not_reposted(self, review_host, pull_import):
        formatter = GitHubFormatter(review_host)

        run_once(formatter, pull_import, {"lint": line_result(
            Comment(file="a.go", line=10, side="RIGHT", text="unused var"))})
        run_once(formatter, pull_import, {"lint": line_result(
            Comment(file="a.go", line=10, side="RIGHT", text="variable x is unused"))})

        assert len(review_host.posted_lines) == 1

    def test_resolves_comments_no_longer_reported(self, review_host, pull_import):
        formatter = GitHubFormatter(review_host)
        run_once(formatter, pull_import, {"lint": line_result(
            Comment(file="a.go", line=10, side="RIGHT", text="unused var"))})

        run_once(formatter, pull_import, {"lint": Result()})

        assert review_host.resolved == [1]
        assert review_host.comments[1].body.startswith("<strike>")
        assert review_host.open_bodies == []

    def test_resolved_comments_are_not_reused(self, review_host, pull_import):
        """Test a diagnostic that comes back after resolution gets a new comment."""
        review_host.add(strike("<!-- manifest:lint -->\n\n> [!TIP]\n> old"), AnnotationKind.REVIEW)
        formatter = GitHubFormatter(review_host)

        run_once(formatter, pull_import, {"lint": line_result(Comment(text="back again"))})

        assert len(review_host.posted_threads) == 1
        assert review_host.resolved == []

    def test_struck_comment_is_never_resolved_again(self, review_host, pull_import):
        """Test a comment resolved in an earlier run is left alone by later runs."""
        formatter = GitHubFormatter(review_host)
        run_once(formatter, pull_import, {"lint": line_result(
            Comment(file="a.go", line=10, side="RIGHT", text="unused var"))})
        run_once(formatter, pull_import, {"lint": Result()})
        assert review_host.resolved == [1]

        run_once(formatter, pull_import, {"lint": Result()})

        assert review_host.resolved == [1]
        assert review_host.comments[1].body == strike(review_host.posted_lines[0].body)

    def test_duplicate_comments_are_all_resolved(self, review_host, pull_import):
        """Test every open comment sharing a fingerprint is resolved, not just the last one."""
        body = "<!-- manifest:lint:a.go:10:RIGHT -->\n\n> [!CAUTION]\n> unused var"
        review_host.add(body, AnnotationKind.FILE_LINE)
        review_host.add(body, AnnotationKind.FILE_LINE)
        formatter = GitHubFormatter(review_host)

        run_once(formatter, pull_import, {"lint": Result()})

        assert sorted(review_host.resolved) == [1, 2]
        assert review_host.open_bodies == []

    def test_duplicate_comments_are_all_kept(self, review_host, pull_import):
        body = "<!-- manifest:lint:a.go:10:RIGHT -->\n\n> [!CAUTION]\n> unused var"
        review_host.add(body, AnnotationKind.FILE_LINE)
        review_host.add(body, AnnotationKind.FILE_LINE)
        formatter = GitHubFormatter(review_host)

        run_once(formatter, pull_import, {"lint": line_result(
            Comment(file="a.go", line=10, side="RIGHT", text="unused var"))})

        assert review_host.resolved == []
        assert review_host.posted_lines == []

    def test_ignores_comments_without_markers(self, review_host, pull_import):
        review_host.add("LGTM, ship it")
        formatter = GitHubFormatter(review_host)

        run_once(formatter, pull_import, {"lint": Result()})

        assert review_host.resolved == []

    def test_same_line_diagnostics_are_merged(self, review_host, pull_import):
        formatter = GitHubFormatter(review_host)
        result = line_result(
            Comment(file="a.go", line=3, side="RIGHT", text="first problem", severity="Error"),
            Comment(file="a.go", line=3, side="RIGHT", text="second problem", severity="Warn"),
            Comment(file="a.go", line=3, side="LEFT", text="old side"),
        )

        run_once(formatter, pull_import, {"lint": result})

        assert len(review_host.posted_lines) == 2
        merged = review_host.posted_lines[0].body
        assert "first problem" in merged
        assert "second problem" in merged
        assert merged.count("<!--") == 1

    def test_top_level_diagnostics_are_merged(self, review_host, pull_import):
        formatter = GitHubFormatter(review_host)
        result = line_result(Comment(text="one"), Comment(file="a.go", text="two"))

        run_once(formatter, pull_import, {"lint": result})

        assert len(review_host.posted_threads) == 1
        assert "> one" in review_host.posted_threads[0]
        assert "> two" in review_host.posted_threads[0]

    def test_checkers_do_not_share_fingerprints(self, review_host, pull_import):
        formatter = GitHubFormatter(review_host)
        comment = Comment(file="a.go", line=1, side="RIGHT", text="x")

        run_once(formatter, pull_import, {"lint": line_result(comment), "vet": line_result(comment)})

        assert len(review_host.posted_lines) == 2

    def test_annotation_with_several_markers(self, review_host, pull_import):
        """Test a comment is kept while any of its fingerprints is still reported."""
        review_host.add("<!-- manifest:lint --><!-- manifest:vet -->")
        formatter = GitHubFormatter(review_host)

        run_once(formatter, pull_import, {"vet": line_result(Comment(text="still here"))})

        assert review_host.resolved == []
        assert review_host.posted_threads == []

    def test_annotation_with_several_stale_markers_resolved_once(self, review_host, pull_import):
        review_host.add("<!-- manifest:lint --><!-- manifest:vet -->")
        formatter = GitHubFormatter(review_host)

        run_once(formatter, pull_import, {"lint": Result()})

        assert review_host.resolved == [1]

    def test_resolution_by_kind(self, review_host, pull_import):
        """Test resolution dispatches on the kind of comment."""
        formatter = GitHubFormatter(review_host)
        formatter.host = Mock(wraps=review_host)
        review_host.add("<!-- manifest:lint -->", AnnotationKind.REVIEW)
        review_host.add("<!-- manifest:lint:a.go:1:RIGHT -->", AnnotationKind.FILE_LINE)

        run_once(formatter, pull_import, {"lint": Result()})

        formatter.host.resolve_thread_annotation.assert_called_once()
        formatter.host.resolve_line_annotation.assert_called_once()

    def test_requires_pull_request_number(self, review_host, import_factory):
        formatter = GitHubFormatter(review_host)

        with pytest.raises(ReconciliationError):
            formatter.before_all(import_factory(number=0))

    def test_fetch_failure(self, review_host, pull_import):
        review_host.fail_fetch = True
        formatter = GitHubFormatter(review_host)

        with pytest.raises(ReconciliationError):
            formatter.before_all(pull_import)

    def test_post_failure_is_reported_after_every_attempt(self, review_host, pull_import):
        review_host.fail_posts = True
        cli_formatter = Mock()
        formatter = GitHubFormatter(review_host, cli_formatter=cli_formatter)
        result = line_result(
            Comment(file="a.go", line=1, side="RIGHT", text="x"),
            Comment(file="b.go", line=2, side="RIGHT", text="y"),
            Comment(text="z"),
        )
        formatter.before_all(pull_import)

        with pytest.raises(ReconciliationError) as exc_info:
            formatter.format("lint", pull_import, result)

        message = str(exc_info.value)
        assert "a.go:1" in message
        assert "b.go:2" in message
        assert "#7" in message
        cli_formatter.format.assert_called_once_with("lint", pull_import, result)

    def test_resolve_failure(self, review_host, pull_import):
        review_host.add("<!-- manifest:lint -->")
        review_host.add("<!-- manifest:vet -->")
        review_host.fail_resolves = True
        formatter = GitHubFormatter(review_host)
        formatter.before_all(pull_import)

        with pytest.raises(ReconciliationError) as exc_info:
            formatter.after_all(pull_import)

        assert "1:" in str(exc_info.value)
        assert "2:" in str(exc_info.value)
