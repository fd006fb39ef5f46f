"""
Firestore collection names and document keys shared by the service and scripts.
"""

USERS_COLLECTION = "users"
GROUPS_COLLECTION = "groups"
QUESTIONS_COLLECTION = "Broadcast_questions"
RESPONSES_COLLECTION = "question_responses"
COMMENTS_COLLECTION = "response_comments"
TEST_COLLECTION = "test"

MESSAGE_REQUESTS_COLLECTION = "message_requests"
PRIVATE_CONVERSATIONS_COLLECTION = "private_conversations"
PRIVATE_MESSAGES_COLLECTION = "private_messages"

QUESTION_ID_FIELD = "questionId"
GROUP_ID_FIELD = "groupId"
LAST_LOGIN_FIELD = "lastLoginAt"

# Firestore rejects batches larger than this.
MAX_BATCH_WRITES = 500
