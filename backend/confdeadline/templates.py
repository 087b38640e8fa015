CATEGORY_LABELS = {
  "computer-science": "Computer Science",
  "engineering": "Engineering",
  "medicine": "Medicine",
  "business": "Business",
  "social-sciences": "Social Sciences",
  "other": "Other",
}

STATUS_LABELS = {
  "planned": "Planned",
  "submitted": "Submitted",
  "accepted": "Accepted",
  "rejected": "Rejected",
  "attended": "Attended",
}

# 저장된 데이터가 하나도 없을 때 쓰는 샘플 2건 (날짜는 오늘 기준 상대 일수)
SAMPLE_CONFERENCES = [
  {
    "name": "International Conference on Machine Learning",
    "location": "Honolulu, Hawaii",
    "website": "https://icml.cc",
    "category": "computer-science",
    "status": "planned",
    "notes": "Premier conference on machine learning research. Planning to submit paper on neural architecture search.",
    "relative_days": {"submissionDate": 7, "notificationDate": 60,
                      "conferenceStartDate": 120, "conferenceEndDate": 126},
  },
  {
    "name": "ACM SIGCHI Conference",
    "location": "Paris, France",
    "website": "https://chi2025.acm.org",
    "category": "computer-science",
    "status": "submitted",
    "notes": "Human-Computer Interaction conference. Submitted paper on UX design patterns.",
    "relative_days": {"submissionDate": -30, "notificationDate": 45,
                      "conferenceStartDate": 160, "conferenceEndDate": 165},
  },
]

# 새 등록 폼: 제출 마감 기본값 = 오늘 + 30일
NEW_CONFERENCE_SUBMISSION_OFFSET_DAYS = 30

GITHUB_EDIT_URL = "https://github.com/{repo}/edit/main/data/conferences.json"
