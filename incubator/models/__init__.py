from .user import UserProfile
from .application import Application
from .assignment import ReviewerAssignment
from .evaluation import Evaluation
from .notification import Notification
# base and mixins are imported by the above as needed
