from datetime import datetime, timedelta, timezone

import pytest

from khcore.podstatus import Pod, PodPhase, find_pods_not_running


def _test_pods():
    return [
        Pod(name="foo-pod", namespace="foo", phase=PodPhase.PENDING),
        Pod(name="bar-pod", namespace="bar", phase=PodPhase.PENDING),
    ]


@pytest.mark.parametrize(
    "namespace, want",
    [
        ("foo", ["pod: foo-pod in namespace: foo is in pod status phase Pending "]),
        (
            "",
            [
                "pod: bar-pod in namespace: bar is in pod status phase Pending ",
                "pod: foo-pod in namespace: foo is in pod status phase Pending ",
            ],
        ),
    ],
)
def test_find_pods_not_running(namespace, want):
    got = find_pods_not_running(_test_pods(), namespace, "10m")
    assert got == want


def test_healthy_phases_are_not_reported():
    pods = [
        Pod(name="a", namespace="ns", phase=PodPhase.RUNNING),
        Pod(name="b", namespace="ns", phase="Succeeded"),
    ]
    assert find_pods_not_running(pods, "", "10m") == []


def test_failed_and_unknown_are_reported():
    pods = [
        Pod(name="a", namespace="ns", phase="Failed"),
        Pod(name="b", namespace="ns", phase=PodPhase.UNKNOWN),
    ]
    got = find_pods_not_running(pods, "", "10m")
    assert got == [
        "pod: a in namespace: ns is in pod status phase Failed ",
        "pod: b in namespace: ns is in pod status phase Unknown ",
    ]


def test_unrecognised_phase_is_not_a_failure():
    pods = [Pod(name="a", namespace="ns", phase="Weird")]
    assert find_pods_not_running(pods, "", "10m") == []


def test_young_pods_are_skipped():
    now = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)
    young = Pod(
        name="young",
        namespace="ns",
        phase=PodPhase.PENDING,
        creation_timestamp=now - timedelta(minutes=5),
    )
    old = Pod(
        name="old",
        namespace="ns",
        phase=PodPhase.PENDING,
        creation_timestamp=now - timedelta(minutes=15),
    )
    got = find_pods_not_running([young, old], "", "10m", now=now)
    assert len(got) == 1
    assert "old" in got[0]


def test_excluded_labels_are_ignored():
    pods = [
        Pod(name="a", namespace="ns", phase="Pending", labels={"app": "kuberhealthy-check"}),
        Pod(name="b", namespace="ns", phase="Pending", labels={"source": "kuberhealthy"}),
        Pod(name="c", namespace="ns", phase="Pending", labels={"app": "other"}),
    ]
    got = find_pods_not_running(pods, "", "10m")
    assert len(got) == 1
    assert got[0].startswith("pod: c ")


def test_bad_skip_duration_raises():
    with pytest.raises(ValueError, match="failed to parse skip duration"):
        find_pods_not_running(_test_pods(), "", "")


def test_skip_duration_as_timedelta():
    now = datetime(2024, 1, 1, tzinfo=timezone.utc)
    pod = Pod(
        name="p",
        namespace="ns",
        phase="Pending",
        creation_timestamp=now - timedelta(minutes=1),
    )
    assert find_pods_not_running([pod], "", timedelta(minutes=2), now=now) == []
    assert len(find_pods_not_running([pod], "", timedelta(seconds=30), now=now)) == 1